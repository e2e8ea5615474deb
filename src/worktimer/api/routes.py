"""
HTTP endpoints for starting, stopping and inspecting employee timers.

Sync endpoints run in a worker thread, and peewee connections belong to the
thread that opened them, so every endpoint holds its own connection scope.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from ..services.timer_service import TimerService
from .schemas import (
    ErrorMessage, HistoryResponse, StatusMessage, TimerEntryOut, TimerStatusResponse
)

router = APIRouter(tags=["timers"])

EMPLOYEE_ID_QUERY = Query(None, description="Employee identifier")

ERROR_RESPONSES = {
    400: {"model": ErrorMessage, "description": "Invalid employee identifier"},
    503: {"model": ErrorMessage, "description": "Store unavailable"},
}


def get_timer_service(request: Request) -> TimerService:
    """Service created at startup; overridable in tests"""
    return request.app.state.timer_service


@router.api_route(
    "/start", methods=["GET", "POST"], response_model=StatusMessage,
    responses={**ERROR_RESPONSES,
               409: {"model": ErrorMessage, "description": "Timer already running"}},
)
def start_timer(
    employee_id: Optional[str] = EMPLOYEE_ID_QUERY,
    service: TimerService = Depends(get_timer_service),
) -> StatusMessage:
    with service.store.connection():
        service.start_timer(employee_id)
    return StatusMessage(status="timer started")


@router.api_route(
    "/stop", methods=["GET", "POST"], response_model=StatusMessage,
    responses={**ERROR_RESPONSES,
               404: {"model": ErrorMessage, "description": "No active timer"}},
)
def stop_timer(
    employee_id: Optional[str] = EMPLOYEE_ID_QUERY,
    service: TimerService = Depends(get_timer_service),
) -> StatusMessage:
    with service.store.connection():
        service.stop_timer(employee_id)
    return StatusMessage(status="timer stopped")


@router.get("/info", response_model=HistoryResponse, responses=ERROR_RESPONSES)
def timer_history(
    employee_id: Optional[str] = EMPLOYEE_ID_QUERY,
    service: TimerService = Depends(get_timer_service),
) -> HistoryResponse:
    with service.store.connection():
        entries = service.get_history(employee_id)
    return HistoryResponse(entries=[TimerEntryOut.from_entry(e) for e in entries])


@router.get("/status", response_model=TimerStatusResponse, responses=ERROR_RESPONSES)
def timer_status(
    employee_id: Optional[str] = EMPLOYEE_ID_QUERY,
    service: TimerService = Depends(get_timer_service),
) -> TimerStatusResponse:
    with service.store.connection():
        entry = service.get_active_timer(employee_id)
    return TimerStatusResponse(
        employee_id=employee_id,
        running=entry is not None,
        entry=TimerEntryOut.from_entry(entry) if entry else None,
    )
