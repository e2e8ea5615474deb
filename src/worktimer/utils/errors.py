"""
Error handling utilities for WorkTimer.
"""


class WorkTimerError(Exception):
    """Base exception for WorkTimer"""
    pass


class ValidationError(WorkTimerError):
    """Raised when an employee identifier is empty or malformed"""
    pass


class ConflictError(WorkTimerError):
    """Raised when a timer is started while one is already running"""
    pass


class NotFoundError(WorkTimerError):
    """Raised when there is no running timer to stop"""
    pass


class StoreError(WorkTimerError):
    """Raised when the underlying database operation fails"""
    pass
