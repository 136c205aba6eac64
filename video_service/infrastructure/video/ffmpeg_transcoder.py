"""FFmpeg implementation of video transcoding."""

import asyncio
import contextlib
import io
import shutil
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from video_service.commons.telemetry import get_logger, timed
from video_service.domain.exceptions import ProcessingError, TranscodeError
from video_service.infrastructure.video.base import (
    EncodedVideo,
    ExtractedFrame,
    TranscoderBase,
)

# Fixed encoding contract. Quality is not configurable per request.
VIDEO_CODEC = "libx264"
CRF = "23"
PRESET = "medium"
AUDIO_CODEC = "aac"
AUDIO_BITRATE = "128k"
THUMBNAIL_OFFSET = "00:00:01"

STDERR_TAIL_CHARS = 2000


class FFmpegTranscoder(TranscoderBase):
    """FFmpeg-based transcoding of uploaded videos.

    Requires ffmpeg to be installed and available in PATH (or configured).
    Each invocation runs as an asyncio subprocess with a wall-clock timeout.
    A timed-out or cancelled invocation kills the child and waits for it.
    """

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        timeout_seconds: float = 900,
    ) -> None:
        """Initialize FFmpeg transcoder.

        Args:
            ffmpeg_path: Path to ffmpeg executable.
            timeout_seconds: Maximum run time of a single invocation.
        """
        self._ffmpeg = ffmpeg_path
        self._timeout = timeout_seconds
        self._logger = get_logger(__name__)

    def encode_command(self, input_path: Path, output_path: Path) -> list[str]:
        """Build the argument list of the encode invocation."""
        return [
            self._ffmpeg,
            "-i",
            str(input_path),
            "-c:v",
            VIDEO_CODEC,
            "-crf",
            CRF,
            "-preset",
            PRESET,
            "-c:a",
            AUDIO_CODEC,
            "-b:a",
            AUDIO_BITRATE,
            "-y",
            str(output_path),
        ]

    def thumbnail_command(self, input_path: Path, output_path: Path) -> list[str]:
        """Build the argument list of the frame extraction invocation."""
        return [
            self._ffmpeg,
            "-i",
            str(input_path),
            "-ss",
            THUMBNAIL_OFFSET,
            "-vframes",
            "1",
            "-y",
            str(output_path),
        ]

    async def _run(self, cmd: list[str], kind: str) -> None:
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise TranscodeError(kind, f"ffmpeg not found at '{self._ffmpeg}'") from e

        try:
            _, stderr_bytes = await asyncio.wait_for(
                process.communicate(), timeout=self._timeout
            )
        except TimeoutError as e:
            await _terminate(process)
            raise TranscodeError(
                kind, f"ffmpeg timed out after {self._timeout}s"
            ) from e
        except asyncio.CancelledError:
            # The child must be gone before the staging files are released.
            await _terminate(process)
            raise

        if process.returncode != 0:
            stderr = _tail(stderr_bytes)
            self._logger.error(
                f"ffmpeg exited with {process.returncode}",
                extra={"kind": kind, "stderr": stderr},
            )
            raise TranscodeError(
                kind,
                f"ffmpeg exited with status {process.returncode}",
                returncode=process.returncode,
                stderr=stderr,
            )

    @timed
    async def encode(self, input_path: Path, output_path: Path) -> EncodedVideo:
        """Re-encode to H.264 video and AAC audio (CRF 23, preset medium)."""
        await self._run(
            self.encode_command(input_path, output_path),
            TranscodeError.ENCODE_FAILED,
        )
        return EncodedVideo(path=output_path, size_bytes=output_path.stat().st_size)

    @timed
    async def extract_frame(
        self,
        input_path: Path,
        output_path: Path,
    ) -> ExtractedFrame:
        """Extract the frame at one second and verify it decodes."""
        await self._run(
            self.thumbnail_command(input_path, output_path),
            TranscodeError.THUMBNAIL_FAILED,
        )
        width, height = inspect_image(output_path)
        return ExtractedFrame(path=output_path, width=width, height=height)


def inspect_image(source: Path | bytes) -> tuple[int, int]:
    """Return the dimensions of an image file or in-memory image.

    Raises:
        ProcessingError: If the file is not a decodable image.
    """
    try:
        with Image.open(_image_source(source)) as img:
            img.verify()
        # verify() leaves the image unusable; reopen for the size.
        with Image.open(_image_source(source)) as img:
            return img.size
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise ProcessingError(f"Unreadable thumbnail image: {e}") from e


def _image_source(source: Path | bytes) -> Path | io.BytesIO:
    if isinstance(source, bytes):
        return io.BytesIO(source)
    return source


def probe_ffmpeg(ffmpeg_path: str = "ffmpeg") -> bool:
    """Return True if the ffmpeg executable can be resolved."""
    return shutil.which(ffmpeg_path) is not None


def _tail(stderr: bytes | str | None) -> str:
    if not stderr:
        return ""
    if isinstance(stderr, bytes):
        stderr = stderr.decode("utf-8", errors="replace")
    return stderr[-STDERR_TAIL_CHARS:]


async def _terminate(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
    await process.wait()
