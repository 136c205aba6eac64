"""API route handlers."""

from video_service.api.openapi.routes import health, uploads, videos

__all__ = [
    "health",
    "uploads",
    "videos",
]
