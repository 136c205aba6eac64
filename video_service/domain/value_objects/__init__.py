"""Domain value objects."""

from video_service.domain.value_objects.artifact_paths import (
    ArtifactPaths,
    base_name,
    output_filenames,
)

__all__ = [
    "ArtifactPaths",
    "base_name",
    "output_filenames",
]
