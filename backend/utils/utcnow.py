"""UTC clock used for log lines and API response timestamps."""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current UTC time as a naive datetime; callers append ``Z`` when rendering."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
