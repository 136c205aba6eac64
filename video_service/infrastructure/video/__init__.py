"""Video transcoding services."""

from video_service.infrastructure.video.base import (
    EncodedVideo,
    ExtractedFrame,
    TranscodeOutput,
    TranscoderBase,
)
from video_service.infrastructure.video.ffmpeg_transcoder import (
    FFmpegTranscoder,
    inspect_image,
    probe_ffmpeg,
)

__all__ = [
    # Base classes
    "TranscoderBase",
    "EncodedVideo",
    "ExtractedFrame",
    "TranscodeOutput",
    # Implementations
    "FFmpegTranscoder",
    "inspect_image",
    "probe_ffmpeg",
]
