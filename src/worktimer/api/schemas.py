"""
Pydantic models for the WorkTimer HTTP API.

``end_time`` and the duration fields are null for a running entry; the API
never substitutes a placeholder date.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models import TimerEntry
from ..utils.formatting import format_duration


class StatusMessage(BaseModel):
    status: str = Field(..., description="Human-readable outcome")


class ErrorMessage(BaseModel):
    """Body of every failed request"""
    detail: str


class TimerEntryOut(BaseModel):
    id: int
    start_time: datetime
    end_time: Optional[datetime] = None
    is_running: bool
    duration_seconds: Optional[float] = Field(
        default=None, description="end_time - start_time in seconds; null while running"
    )
    duration_text: Optional[str] = Field(
        default=None, description="Duration as HH:MM:SS; null while running"
    )

    @classmethod
    def from_entry(cls, entry: TimerEntry) -> "TimerEntryOut":
        duration = entry.duration
        return cls(
            id=entry.id,
            start_time=entry.start_time,
            end_time=entry.end_time,
            is_running=entry.is_running,
            duration_seconds=duration.total_seconds() if duration is not None else None,
            duration_text=format_duration(duration) if duration is not None else None,
        )


class HistoryResponse(BaseModel):
    entries: List[TimerEntryOut] = Field(default_factory=list)


class TimerStatusResponse(BaseModel):
    employee_id: str
    running: bool
    entry: Optional[TimerEntryOut] = None
