"""
Configuration helpers for the eventhub backend.

Settings are read once from environment variables (data paths, token
signing, logging, CORS) so that routers/services do not fetch os.environ
directly.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    data_dir: Path
    users_file: str
    events_file: str
    jwt_secret: str
    jwt_algorithm: str
    token_ttl_seconds: int
    password_min_length: int
    log_level: str
    cors_origins: tuple[str, ...]

    @property
    def users_path(self) -> Path:
        return self.data_dir / self.users_file

    @property
    def events_path(self) -> Path:
        return self.data_dir / self.events_file


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def _csv(value: str | None) -> tuple[str, ...]:
        if not value:
            return ()
        return tuple(item.strip().rstrip("/") for item in value.split(",") if item.strip())

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        data_dir=Path(os.getenv("DATA_DIR", "data")).expanduser(),
        users_file=os.getenv("USERS_FILE", "users.json"),
        events_file=os.getenv("EVENTS_FILE", "events.json"),
        jwt_secret=os.getenv("JWT_SECRET", "dev-secret-change-in-production"),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        token_ttl_seconds=_int(os.getenv("TOKEN_TTL_SECONDS", "86400"), 86400),
        password_min_length=_int(os.getenv("PASSWORD_MIN_LENGTH", "6"), 6),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        cors_origins=_csv(os.getenv("CORS_ORIGINS")),
    )
