"""
Logging setup shared by the server and the command-line client.
"""
import logging
from typing import Optional

ROOT_LOGGER_NAME = "worktimer"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Attach a stream handler to the package logger and set its level.

    Calling this more than once only updates the level.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    resolved = getattr(logging, (level or "INFO").upper(), logging.INFO)
    logger.setLevel(resolved)

    if not any(getattr(h, '_worktimer_handler', False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._worktimer_handler = True
        logger.addHandler(handler)
    return logger
