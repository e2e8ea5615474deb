"""
Configuration for WorkTimer.

Values are read from environment variables on first use:

- DATABASE_URL
    Store connection string understood by ``playhouse.db_url``.
    Default: "sqlite:///worktimer.db"
- WORKTIMER_HOST / WORKTIMER_PORT
    Address the HTTP server binds to. Default: 0.0.0.0:8080
- WORKTIMER_SERVER_URL
    Base URL used by the command-line client. Default: "http://localhost:8080"
- WORKTIMER_LOG_LEVEL
    Logging level name. Default: "INFO"
- WORKTIMER_SQLITE_BUSY_TIMEOUT
    Milliseconds a SQLite writer waits for a lock. Default: 5000
"""
import logging
import os
from dataclasses import dataclass
from typing import Optional

ENV_DATABASE_URL = "DATABASE_URL"
DEFAULT_DATABASE_URL = "sqlite:///worktimer.db"
DEFAULT_SERVER_URL = "http://localhost:8080"

logger = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not an integer, using {default}")
        return default


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the store, the HTTP server and the CLI"""
    database_url: str = DEFAULT_DATABASE_URL
    host: str = "0.0.0.0"
    port: int = 8080
    server_url: str = DEFAULT_SERVER_URL
    log_level: str = "INFO"
    sqlite_busy_timeout: int = 5000

    @classmethod
    def from_env(cls) -> "Settings":
        port = _env_int("WORKTIMER_PORT", cls.port)
        if port <= 0 or port > 65535:
            logger.warning(f"Ignoring WORKTIMER_PORT={port}: out of range, using {cls.port}")
            port = cls.port

        return cls(
            database_url=os.getenv(ENV_DATABASE_URL) or cls.database_url,
            host=os.getenv("WORKTIMER_HOST") or cls.host,
            port=port,
            server_url=(os.getenv("WORKTIMER_SERVER_URL") or cls.server_url).rstrip("/"),
            log_level=(os.getenv("WORKTIMER_LOG_LEVEL") or cls.log_level).upper(),
            sqlite_busy_timeout=_env_int("WORKTIMER_SQLITE_BUSY_TIMEOUT", cls.sqlite_busy_timeout),
        )


_SETTINGS: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the process settings, reading the environment on first use"""
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS


def set_settings(settings: Optional[Settings]) -> None:
    """Replace (or with None, reset) the process settings. Used by tests."""
    global _SETTINGS
    _SETTINGS = settings
