from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings

# Get the directory where this config file is located.
_BACKEND_DIR = Path(__file__).parent.resolve()


def _detect_project_root(backend_dir: Path) -> Path:
    """Resolve project root from the backend directory in the repo layout."""
    return backend_dir.parent.resolve()


_PROJECT_ROOT = _detect_project_root(_BACKEND_DIR)


class Settings(BaseSettings):
    # Redis (ordered-set store). REDIS_URL wins over the discrete fields.
    REDIS_URL: Optional[str] = None
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_PASSWORD: Optional[str] = None
    REDIS_DATABASE: int = 1  # DB 1 is reserved for leaderboards

    # Timeouts (seconds)
    REDIS_SOCKET_TIMEOUT_SECONDS: float = 5.0  # Per-command round trip
    REDIS_CONNECT_TIMEOUT_SECONDS: float = 5.0
    REDIS_PROBE_TIMEOUT_SECONDS: float = 5.0  # Startup PING bound

    # Leaderboard
    LEADERBOARD_DEFAULT_LIMIT: int = 100
    LEADERBOARD_MAX_LIMIT: int = 500
    LEADERBOARD_ATOMIC_WRITES: bool = False  # Wrap write pipelines in MULTI/EXEC
    LEADERBOARD_ALLOW_CLEAR: bool = False  # Expose DELETE /leaderboard

    # Production Settings
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    CORS_ORIGINS: list[str] = ["*"]

    @field_validator("REDIS_URL", "REDIS_PASSWORD", mode="before")
    @classmethod
    def _normalize_optional_field(cls, value: object) -> object:
        """Trim accidental quotes/whitespace from connection env vars."""
        if value is None:
            return value
        text = str(value).strip().strip('"').strip("'")
        return text or None

    @field_validator("REDIS_HOST", mode="before")
    @classmethod
    def _normalize_host(cls, value: object) -> object:
        if value is None:
            return "localhost"
        text = str(value).strip().strip('"').strip("'")
        return text or "localhost"

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        if value is None:
            return "INFO"
        return str(value).strip().upper() or "INFO"

    class Config:
        # Load project-root .env first (common workflow), then backend/.env
        # as an override if present.
        env_file = (
            str(_PROJECT_ROOT / ".env"),
            str(_BACKEND_DIR / ".env"),
        )
        env_file_encoding = "utf-8"


settings = Settings()
