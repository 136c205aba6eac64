"""Video record endpoints."""

from fastapi import APIRouter, Response, status

from video_service.api.dependencies import CatalogServiceDep
from video_service.application.dtos.videos import (
    CreateVideoRequest,
    CreateVideoResponse,
    LikeResponse,
    VideoSummary,
)

router = APIRouter()


@router.get(
    "/videos",
    response_model=list[VideoSummary],
    summary="List videos",
    description="List all videos, newest first.",
)
async def list_videos(service: CatalogServiceDep) -> list[VideoSummary]:
    """List all videos."""
    return await service.list_videos()


@router.post(
    "/videos",
    response_model=CreateVideoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create video record",
    description=(
        "Create a placeholder record. The binary is sent afterwards to the "
        "returned upload URL."
    ),
)
async def create_video(
    request: CreateVideoRequest,
    service: CatalogServiceDep,
) -> CreateVideoResponse:
    """Create a video record awaiting its upload."""
    return await service.create_video(request)


@router.get(
    "/videos/{video_id}",
    response_model=VideoSummary,
    summary="Get video details",
    description="Get a video and count one view.",
)
async def get_video(
    video_id: str,
    service: CatalogServiceDep,
) -> VideoSummary:
    """Get details for a specific video."""
    return await service.get_video(video_id)


@router.get(
    "/videos/{video_id}/stream",
    response_model=str,
    summary="Resolve stream URL",
    description="Return the playable URL of the encoded video.",
)
async def stream_video(
    video_id: str,
    service: CatalogServiceDep,
) -> str:
    """Resolve the playable URL of a video."""
    return await service.stream_url(video_id)


@router.delete(
    "/videos/{video_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete video",
    description="Delete the record, then its stored artifacts on a best-effort basis.",
)
async def delete_video(
    video_id: str,
    service: CatalogServiceDep,
) -> Response:
    """Delete a video and its artifacts."""
    await service.delete_video(video_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/videos/{video_id}/like",
    response_model=LikeResponse,
    summary="Toggle like",
    description="Toggle a like on the video and return the new like count.",
)
async def like_video(
    video_id: str,
    service: CatalogServiceDep,
) -> LikeResponse:
    """Toggle a like atomically."""
    return await service.like_video(video_id)
