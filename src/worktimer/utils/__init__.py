"""
Utilities for WorkTimer.
"""

from .errors import (
    WorkTimerError,
    ValidationError,
    ConflictError,
    NotFoundError,
    StoreError,
)
from .formatting import (
    format_timestamp,
    format_duration,
    format_entry_list,
)
from .logging_setup import configure_logging

__all__ = [
    'WorkTimerError',
    'ValidationError',
    'ConflictError',
    'NotFoundError',
    'StoreError',
    'format_timestamp',
    'format_duration',
    'format_entry_list',
    'configure_logging',
]
