"""
Entry point for the WorkTimer HTTP API.

Intended usage:
    uvicorn --factory worktimer.api.app:create_app --host 0.0.0.0 --port 8080
or the ``worktimer-server`` console script.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import Settings, get_settings
from ..data.database import EntryStore, open_store
from ..services.timer_service import TimerService
from ..utils.errors import (
    ConflictError, NotFoundError, StoreError, ValidationError, WorkTimerError
)
from ..utils.logging_setup import configure_logging
from .routes import router

logger = logging.getLogger(__name__)

STATUS_CODES = {
    ValidationError: 400,
    NotFoundError: 404,
    ConflictError: 409,
    StoreError: 503,
}


def _status_for(exc: WorkTimerError) -> int:
    for error_type, status_code in STATUS_CODES.items():
        if isinstance(exc, error_type):
            return status_code
    return 500


async def _handle_worktimer_error(request: Request, exc: WorkTimerError) -> JSONResponse:
    status_code = _status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected ({status_code}): {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def create_app(store: Optional[EntryStore] = None,
               settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        store: already constructed store; when omitted one is opened from
            ``settings.database_url`` at startup and closed at shutdown
        settings: runtime settings, defaults to the environment
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = store is None
        active_store = store
        if owned:
            active_store = open_store(settings.database_url,
                                      busy_timeout=settings.sqlite_busy_timeout)
        else:
            active_store.connect()
        app.state.timer_service = TimerService(active_store)
        logger.info("WorkTimer HTTP API started")
        try:
            yield
        finally:
            active_store.close()
            logger.info("WorkTimer HTTP API stopped")

    app = FastAPI(title="WorkTimer HTTP API", version=__version__, lifespan=lifespan)
    app.add_exception_handler(WorkTimerError, _handle_worktimer_error)

    @app.get("/health", tags=["system"])
    def health() -> dict:
        return {"status": "ok", "version": __version__}

    app.include_router(router)
    return app


def main():
    """Run the API with uvicorn using the configured host and port"""
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(settings=settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
