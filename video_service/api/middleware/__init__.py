"""API middleware components."""

from video_service.api.middleware.error_handler import (
    APIError,
    error_handler_middleware,
    validation_exception_handler,
)
from video_service.api.middleware.logging import LoggingMiddleware

__all__ = [
    "APIError",
    "LoggingMiddleware",
    "error_handler_middleware",
    "validation_exception_handler",
]
