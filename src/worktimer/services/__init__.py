"""
Service layer for WorkTimer business logic.
"""

from .timer_service import TimerService, validate_employee_id

__all__ = ['TimerService', 'validate_employee_id']
