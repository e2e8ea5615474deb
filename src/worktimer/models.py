"""
Domain values handed to callers of the timer service.
"""
import datetime
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TimerEntry:
    """One recorded work interval for an employee.

    ``end_time`` is None while the timer runs. ``duration`` is derived from
    the two timestamps, so a stopped entry always satisfies
    ``duration == end_time - start_time``.
    """
    id: int
    employee_id: str
    start_time: datetime.datetime
    end_time: Optional[datetime.datetime] = None

    @property
    def is_running(self) -> bool:
        return self.end_time is None

    @property
    def duration(self) -> Optional[datetime.timedelta]:
        if self.end_time is None:
            return None
        return self.end_time - self.start_time

