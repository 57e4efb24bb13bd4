"""Middleware registration."""

from fastapi import FastAPI

from chronolog.config import Settings
from chronolog.middleware.cors import setup_cors
from chronolog.middleware.error_handler import setup_error_handlers
from chronolog.middleware.logging import setup_logging
from chronolog.middleware.rate_limit import RateLimitMiddleware
from chronolog.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware in the correct order.

    Starlette executes middleware in reverse-add order (last added = outermost),
    so CORS goes last to wrap 429 responses from the rate limiter.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
