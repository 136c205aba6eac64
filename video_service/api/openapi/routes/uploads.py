"""Video binary upload endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query, Request, status
from starlette.datastructures import UploadFile
from starlette.formparsers import MultiPartException

from video_service.api.dependencies import IngestionServiceDep
from video_service.api.middleware.error_handler import APIError
from video_service.application.dtos.ingestion import (
    LEGACY_FILE_FIELD,
    THUMBNAIL_FIELD,
    VIDEO_FIELD,
    UploadedPart,
    UploadVideoResponse,
)

router = APIRouter()


async def read_upload_parts(
    request: Request,
    fields: tuple[str, ...],
) -> list[UploadedPart]:
    """Read the named file fields of a multipart request.

    Fields with other names, and non-file values, are ignored.

    Raises:
        APIError: If the body is not valid multipart data.
    """
    content_type = request.headers.get("content-type", "")
    if not content_type.startswith("multipart/form-data"):
        raise APIError(
            code="INVALID_UPLOAD",
            message="Expected a multipart/form-data body",
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    parts: list[UploadedPart] = []
    try:
        async with request.form() as form:
            for field in fields:
                value = form.get(field)
                if not isinstance(value, UploadFile):
                    continue
                parts.append(
                    UploadedPart(
                        field_name=field,
                        filename=value.filename,
                        content_type=value.content_type,
                        data=await value.read(),
                    )
                )
    except MultiPartException as e:
        raise APIError(
            code="INVALID_UPLOAD",
            message=f"Malformed multipart body: {e.message}",
            status_code=status.HTTP_400_BAD_REQUEST,
        ) from e

    return parts


@router.post(
    "/videos/upload",
    response_model=UploadVideoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload video without a record (deprecated)",
    description=(
        "Transcode and store a video sent in the 'file' field, then create "
        "its record. Prefer POST /videos followed by the returned upload URL."
    ),
    deprecated=True,
)
async def upload_only(
    request: Request,
    service: IngestionServiceDep,
    owner: Annotated[
        str,
        Query(min_length=1, description="Identifier of the uploader"),
    ],
) -> UploadVideoResponse:
    """Upload a video and create its record in one request."""
    parts = await read_upload_parts(request, (LEGACY_FILE_FIELD,))
    return await service.upload_only(parts, owner)


@router.post(
    "/videos/{video_id}/upload",
    response_model=UploadVideoResponse,
    summary="Upload video binary",
    description=(
        "Transcode the 'video' field, store it with a thumbnail (the optional "
        "'thumbnail' field, or a frame extracted at one second) and update "
        "the record."
    ),
)
async def upload_video(
    video_id: str,
    request: Request,
    service: IngestionServiceDep,
) -> UploadVideoResponse:
    """Upload the binary for an existing record."""
    parts = await read_upload_parts(request, (VIDEO_FIELD, THUMBNAIL_FIELD))
    return await service.upload_to_record(video_id, parts)
