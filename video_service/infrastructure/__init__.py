"""Infrastructure layer - transcoding, staging and persistence adapters."""

from video_service.infrastructure.factory import (
    InfrastructureFactory,
    get_factory,
    reset_factory,
)

__all__ = [
    "InfrastructureFactory",
    "get_factory",
    "reset_factory",
]
