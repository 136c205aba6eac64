"""Error handling middleware and exception handlers."""

from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import RequestResponseEndpoint
from starlette.responses import Response

from video_service.application.services.ingestion import IngestionError
from video_service.commons.telemetry.logger import get_logger
from video_service.domain.exceptions import (
    ClientError,
    DomainException,
    InvalidPayloadError,
    InvalidUploadError,
    ProcessingError,
    StagingError,
    TranscodeError,
    UploadTooLargeError,
    UpstreamError,
    VideoNotFoundException,
)

logger = get_logger(__name__)


class APIError(Exception):
    """Base API error with code and details."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize API error.

        Args:
            code: Error code for clients.
            message: Human-readable error message.
            status_code: HTTP status code.
            details: Additional error details.
        """
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


def _build_error_response(
    request: Request,
    code: str,
    message: str,
    status_code: int,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Build standardized error response.

    Args:
        request: HTTP request.
        code: Error code.
        message: Error message.
        status_code: HTTP status code.
        details: Additional details.

    Returns:
        JSON error response.
    """
    request_id = getattr(request.state, "request_id", "unknown")

    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
                "request_id": request_id,
            }
        },
        headers={"X-Request-ID": request_id},
    )


def _classify(exc: DomainException) -> tuple[str, int, str, dict[str, Any]]:  # noqa: PLR0911
    """Map a domain exception to (code, status, client message, details)."""
    if isinstance(exc, VideoNotFoundException):
        return (
            "VIDEO_NOT_FOUND",
            status.HTTP_404_NOT_FOUND,
            str(exc),
            {"video_id": exc.video_id},
        )

    if isinstance(exc, UploadTooLargeError):
        return (
            "UPLOAD_TOO_LARGE",
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            str(exc),
            {"field": exc.field, "limit_bytes": exc.limit_bytes},
        )

    if isinstance(exc, InvalidUploadError):
        return (
            "INVALID_UPLOAD",
            status.HTTP_400_BAD_REQUEST,
            exc.reason,
            {"field": exc.field} if exc.field else {},
        )

    if isinstance(exc, InvalidPayloadError):
        return (
            "INVALID_PAYLOAD",
            status.HTTP_400_BAD_REQUEST,
            exc.reason,
            {"errors": exc.errors} if exc.errors else {},
        )

    if isinstance(exc, ClientError):
        return "BAD_REQUEST", exc.status_code, str(exc), {}

    if isinstance(exc, UpstreamError):
        # The upstream body stays in the logs.
        return (
            "UPSTREAM_ERROR",
            status.HTTP_502_BAD_GATEWAY,
            f"{exc.service} {exc.operation} failed",
            {
                "service": exc.service,
                "operation": exc.operation,
                "upstream_status": exc.status_code,
            },
        )

    if isinstance(exc, TranscodeError):
        return (
            "TRANSCODE_FAILED",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            exc.reason,
            {"kind": exc.kind, "returncode": exc.returncode},
        )

    if isinstance(exc, ProcessingError):
        return (
            "PROCESSING_ERROR",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            str(exc),
            {},
        )

    if isinstance(exc, StagingError):
        return (
            "STAGING_ERROR",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Temporary storage is unavailable",
            {},
        )

    return "DOMAIN_ERROR", status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc), {}


def _handle_domain_exception(
    request: Request,
    exc: DomainException,
    extra_details: dict[str, Any] | None = None,
) -> JSONResponse:
    code, status_code, message, details = _classify(exc)
    details = {**details, **(extra_details or {})}

    if status_code < status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.warning(f"Client error {code}: {exc}", extra={"details": details})
    elif isinstance(exc, UpstreamError):
        logger.error(
            f"Upstream error: {exc}",
            extra={"upstream_status": exc.status_code, "upstream_body": exc.body},
        )
    else:
        logger.error(f"Server error {code}: {exc}", extra={"details": details})

    return _build_error_response(
        request=request,
        code=code,
        message=message,
        status_code=status_code,
        details=details,
    )


def _handle_exception(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle exception and return appropriate error response.

    Args:
        request: HTTP request.
        exc: Exception to handle.

    Returns:
        JSON error response.
    """
    if isinstance(exc, APIError):
        logger.warning(
            f"API error: {exc.code}",
            extra={
                "error_code": exc.code,
                "error_message": exc.message,
                "details": exc.details,
            },
        )
        return _build_error_response(
            request=request,
            code=exc.code,
            message=exc.message,
            status_code=exc.status_code,
            details=exc.details,
        )

    if isinstance(exc, IngestionError):
        # The status follows the cause; the stage is reported alongside.
        if exc.cause is not None:
            return _handle_domain_exception(
                request, exc.cause, {"stage": exc.stage.value}
            )
        logger.error(f"Ingestion error at stage {exc.stage.value}: {exc}")
        return _build_error_response(
            request=request,
            code="INGESTION_ERROR",
            message=str(exc),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={"stage": exc.stage.value},
        )

    if isinstance(exc, DomainException):
        return _handle_domain_exception(request, exc)

    # Catch-all for unexpected errors
    logger.exception(f"Unexpected error: {exc}")
    return _build_error_response(
        request=request,
        code="INTERNAL_ERROR",
        message="An unexpected error occurred",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def error_handler_middleware(
    request: Request,
    call_next: RequestResponseEndpoint,
) -> Response:
    """Middleware to catch and format all exceptions.

    Args:
        request: HTTP request.
        call_next: Next handler in chain.

    Returns:
        HTTP response.
    """
    try:
        return await call_next(request)
    except Exception as exc:
        return _handle_exception(request, exc)


async def validation_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Report request validation failures as 400 in the common error shape."""
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    return _handle_domain_exception(
        request,
        InvalidPayloadError(
            "Request validation failed",
            [
                {
                    "loc": [str(part) for part in error.get("loc", ())],
                    "msg": error.get("msg", ""),
                    "type": error.get("type", ""),
                }
                for error in errors
            ],
        ),
    )
