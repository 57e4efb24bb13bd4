"""Exception handlers: every error leaves the API as a JSON body."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from chronolog.tracking.time_service import TimeEntryIntegrityError

logger = structlog.get_logger()

INCONSISTENT_ENTRIES_DETAIL = "Stored time entries are inconsistent"


def setup_error_handlers(app: FastAPI) -> None:
    """Register the HTTP, validation, time-entry integrity and catch-all handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # A dict detail (nothing-to-claim progress) is the whole body.
        content = exc.detail if isinstance(exc.detail, dict) else {"detail": exc.detail}
        return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": "Validation error", "errors": exc.errors()})

    @app.exception_handler(TimeEntryIntegrityError)
    async def integrity_exception_handler(request: Request, exc: TimeEntryIntegrityError) -> JSONResponse:
        """Routes that aggregate time without mapping this error still answer with a 500 body."""
        logger.error("time_entry_integrity_error", path=request.url.path, entry_id=exc.entry_id, error=str(exc))
        return JSONResponse(status_code=500, content={"detail": INCONSISTENT_ENTRIES_DETAIL})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
