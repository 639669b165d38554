from .logger import setup_logging, get_logger, ContextLogger, JSONFormatter
from .utcnow import utcnow

__all__ = [
    # Logger
    "setup_logging",
    "get_logger",
    "ContextLogger",
    "JSONFormatter",

    # Time
    "utcnow",
]
