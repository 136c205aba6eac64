"""Domain exceptions for the video ingestion service.

The hierarchy mirrors how failures surface to callers:

- ``ClientError``: the request itself is wrong (4xx), never logged as a fault.
- ``UpstreamError``: the metadata store or blob store answered with a
  non-success status (5xx), logged with the upstream status and body.
- ``ProcessingError``: the transcoder failed or produced unreadable output.
- ``StagingError``: the local filesystem could not provide a staging file.
"""


class DomainException(Exception):
    """Base exception for domain errors."""


class ClientError(DomainException):
    """Raised when a request is invalid and must not be retried as-is."""

    status_code: int = 400


class InvalidUploadError(ClientError):
    """Raised when an uploaded multipart payload is rejected."""

    def __init__(self, reason: str, field: str | None = None) -> None:
        self.reason = reason
        self.field = field
        super().__init__(reason)


class UploadTooLargeError(InvalidUploadError):
    """Raised when an uploaded file exceeds the configured size limit."""

    status_code = 413

    def __init__(self, field: str, size_bytes: int, limit_bytes: int) -> None:
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes
        super().__init__(
            f"Field '{field}' is {size_bytes} bytes, limit is {limit_bytes} bytes",
            field=field,
        )


class InvalidPayloadError(ClientError):
    """Raised when a JSON request body fails validation."""

    def __init__(
        self,
        reason: str,
        errors: list[dict[str, object]] | None = None,
    ) -> None:
        self.reason = reason
        self.errors = errors or []
        super().__init__(reason)


class VideoNotFoundException(ClientError):
    """Raised when a requested video record does not exist."""

    status_code = 404

    def __init__(self, video_id: str) -> None:
        self.video_id = video_id
        super().__init__(f"Video not found: {video_id}")


class UpstreamError(DomainException):
    """Raised when a remote service returns a non-success response."""

    def __init__(
        self,
        service: str,
        operation: str,
        status_code: int | None,
        body: str = "",
    ) -> None:
        self.service = service
        self.operation = operation
        self.status_code = status_code
        self.body = body
        status = status_code if status_code is not None else "no response"
        super().__init__(f"{service} {operation} failed ({status}): {body}")


class BlobUploadError(UpstreamError):
    """Raised when the object store rejects an upload."""

    def __init__(
        self,
        bucket: str,
        path: str,
        status_code: int | None,
        body: str = "",
    ) -> None:
        self.bucket = bucket
        self.path = path
        super().__init__("blob_storage", f"upload {bucket}/{path}", status_code, body)


class MetadataStoreError(UpstreamError):
    """Raised when the metadata store rejects a query or mutation."""

    def __init__(
        self,
        operation: str,
        status_code: int | None,
        body: str = "",
    ) -> None:
        super().__init__("metadata_store", operation, status_code, body)


class ProcessingError(DomainException):
    """Raised when media processing fails for reasons other than the input."""


class TranscodeError(ProcessingError):
    """Raised when an FFmpeg invocation exits unsuccessfully."""

    ENCODE_FAILED = "encode_failed"
    THUMBNAIL_FAILED = "thumbnail_failed"

    def __init__(
        self,
        kind: str,
        reason: str,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        self.kind = kind
        self.reason = reason
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"{kind}: {reason}")


class StagingError(DomainException):
    """Raised when a staging file cannot be created, written or read."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Staging failed: {reason}")
