"""Abstract base class for video transcoding."""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass
class EncodedVideo:
    """Result of re-encoding an input file."""

    path: Path
    size_bytes: int


@dataclass
class ExtractedFrame:
    """A single frame extracted as the video thumbnail."""

    path: Path
    width: int
    height: int


@dataclass
class TranscodeOutput:
    """Both artifacts of a transcode job."""

    video: EncodedVideo
    thumbnail: ExtractedFrame


class TranscoderBase(ABC):
    """Abstract base class for video transcoding.

    Implementations should handle:
    - FFmpeg (subprocess)

    Each method maps to one transcoder invocation so that tests can
    substitute a stub for the binary.
    """

    @abstractmethod
    async def encode(self, input_path: Path, output_path: Path) -> EncodedVideo:
        """Re-encode ``input_path`` into a compressed H.264/AAC MP4.

        Raises:
            TranscodeError: With kind ``encode_failed``.
        """

    @abstractmethod
    async def extract_frame(
        self,
        input_path: Path,
        output_path: Path,
    ) -> ExtractedFrame:
        """Extract a single frame at one second as a JPEG thumbnail.

        Raises:
            TranscodeError: With kind ``thumbnail_failed``.
            ProcessingError: If the extracted image is unreadable.
        """

    async def transcode(
        self,
        input_path: Path,
        output_video_path: Path,
        output_thumbnail_path: Path,
        *,
        concurrent: bool = True,
    ) -> TranscodeOutput:
        """Run both invocations and return when both have finished.

        When run concurrently, a failure of one invocation is raised only
        after the other has completed, and an encode failure takes
        precedence.
        """
        if not concurrent:
            video = await self.encode(input_path, output_video_path)
            frame = await self.extract_frame(input_path, output_thumbnail_path)
            return TranscodeOutput(video=video, thumbnail=frame)

        video_result, frame_result = await asyncio.gather(
            self.encode(input_path, output_video_path),
            self.extract_frame(input_path, output_thumbnail_path),
            return_exceptions=True,
        )
        if isinstance(video_result, BaseException):
            raise video_result
        if isinstance(frame_result, BaseException):
            raise frame_result
        return TranscodeOutput(video=video_result, thumbnail=frame_result)
