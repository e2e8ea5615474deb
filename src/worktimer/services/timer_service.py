"""
Timer service enforcing the start/stop state machine per employee.
"""
import datetime
import logging
from typing import Callable, List, Optional

from ..data.database import EntryStore
from ..models import TimerEntry
from ..utils.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

MAX_EMPLOYEE_ID_LENGTH = 64


def validate_employee_id(employee_id) -> str:
    """
    Check an employee identifier. Identifiers are opaque: surrounding
    whitespace is kept, so " E1" and "E1" are different employees.

    Returns:
        The identifier unchanged

    Raises:
        ValidationError: the identifier is missing, empty or too long
    """
    if not isinstance(employee_id, str):
        raise ValidationError("employee id is required")
    if not employee_id.strip():
        raise ValidationError("employee id is required")
    if len(employee_id) > MAX_EMPLOYEE_ID_LENGTH:
        raise ValidationError(
            f"employee id must be at most {MAX_EMPLOYEE_ID_LENGTH} characters"
        )
    return employee_id


class TimerService:
    """Starts and stops employee timers and answers history queries"""

    def __init__(self, store: EntryStore,
                 clock: Callable[[], datetime.datetime] = datetime.datetime.now):
        """
        Initialize timer service.

        Args:
            store: EntryStore used for all reads and writes
            clock: returns the current time; replaced in tests
        """
        self.store = store
        self.clock = clock

    def start_timer(self, employee_id: str) -> TimerEntry:
        """
        Start a timer for an employee, registering the employee on first use.

        Raises:
            ValidationError: invalid employee id
            ConflictError: a timer is already running for the employee
            StoreError: the store failed
        """
        employee_id = validate_employee_id(employee_id)
        entry = self.store.start_entry(employee_id, self.clock())
        logger.info(f"Timer started - {employee_id} (entry {entry.id})")
        return entry

    def stop_timer(self, employee_id: str) -> TimerEntry:
        """
        Stop the running timer of an employee.

        Raises:
            ValidationError: invalid employee id
            NotFoundError: no timer is running, including when a concurrent
                call closed it first
            StoreError: the store failed
        """
        employee_id = validate_employee_id(employee_id)
        running = self.store.get_running_entry(employee_id)
        if running is None:
            raise NotFoundError(f"no active timer for employee {employee_id}")

        end_time = self.clock()
        if not self.store.close_running_entry(employee_id, end_time, entry_id=running.id):
            raise NotFoundError(f"no active timer for employee {employee_id}")

        entry = TimerEntry(
            id=running.id,
            employee_id=employee_id,
            start_time=running.start_time,
            end_time=end_time,
        )
        logger.info(f"Timer stopped - {employee_id} (entry {entry.id}, {entry.duration})")
        return entry

    def get_history(self, employee_id: str) -> List[TimerEntry]:
        """All entries of an employee, most recent first; empty if unknown"""
        employee_id = validate_employee_id(employee_id)
        return self.store.list_entries(employee_id)

    def get_active_timer(self, employee_id: str) -> Optional[TimerEntry]:
        employee_id = validate_employee_id(employee_id)
        return self.store.get_running_entry(employee_id)
