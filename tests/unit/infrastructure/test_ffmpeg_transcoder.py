"""Unit tests for the FFmpeg transcoder."""

import asyncio
import io
from pathlib import Path
from unittest.mock import patch

import pytest
from PIL import Image

from video_service.domain.exceptions import ProcessingError, TranscodeError
from video_service.infrastructure.video import (
    EncodedVideo,
    ExtractedFrame,
    FFmpegTranscoder,
    TranscoderBase,
    inspect_image,
)

EXEC = (
    "video_service.infrastructure.video.ffmpeg_transcoder"
    ".asyncio.create_subprocess_exec"
)


def _jpeg_bytes(size=(64, 36)):
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(200, 10, 10)).save(buffer, format="JPEG")
    return buffer.getvalue()


class _FakeProcess:
    """Stands in for an asyncio subprocess running ffmpeg."""

    def __init__(self, cmd, returncode=0, stderr=b"", output=None, hang=False):
        self.cmd = cmd
        self.returncode = None
        self.killed = False
        self._exit_code = returncode
        self._stderr = stderr
        self._output = output
        self._hang = hang

    async def communicate(self):
        if self._hang:
            await asyncio.Event().wait()
        if self._output is not None:
            Path(self.cmd[-1]).write_bytes(self._output)
        elif self._exit_code == 0:
            target = Path(self.cmd[-1])
            data = _jpeg_bytes() if target.suffix == ".jpg" else b"encoded-video"
            target.write_bytes(data)
        self.returncode = self._exit_code
        return b"", self._stderr

    def kill(self):
        self.killed = True
        self.returncode = -9

    async def wait(self):
        return self.returncode


def _fake_ffmpeg(returncode=0, stderr=b"", output=None, hang=False):
    """Build a create_subprocess_exec replacement, keeping spawned processes."""
    spawned: list[_FakeProcess] = []

    async def create(*cmd, **kwargs):
        process = _FakeProcess(list(cmd), returncode, stderr, output, hang)
        spawned.append(process)
        return process

    create.spawned = spawned
    return create


@pytest.fixture
def transcoder():
    return FFmpegTranscoder(ffmpeg_path="ffmpeg", timeout_seconds=30)


@pytest.fixture
def files(tmp_path):
    source = tmp_path / "input.bin"
    source.write_bytes(b"raw upload")
    return source, tmp_path / "out.mp4", tmp_path / "thumb.jpg"


class TestCommands:
    """Tests for the fixed FFmpeg argument contract."""

    def test_encode_command(self, transcoder):
        cmd = transcoder.encode_command(Path("in.bin"), Path("out.mp4"))
        assert cmd == [
            "ffmpeg",
            "-i",
            "in.bin",
            "-c:v",
            "libx264",
            "-crf",
            "23",
            "-preset",
            "medium",
            "-c:a",
            "aac",
            "-b:a",
            "128k",
            "-y",
            "out.mp4",
        ]

    def test_thumbnail_command(self, transcoder):
        cmd = transcoder.thumbnail_command(Path("in.bin"), Path("thumb.jpg"))
        assert cmd == [
            "ffmpeg",
            "-i",
            "in.bin",
            "-ss",
            "00:00:01",
            "-vframes",
            "1",
            "-y",
            "thumb.jpg",
        ]


class TestEncode:
    """Tests for FFmpegTranscoder.encode."""

    async def test_success(self, transcoder, files):
        source, video, _ = files
        fake = _fake_ffmpeg()
        with patch(EXEC, side_effect=fake):
            result = await transcoder.encode(source, video)

        assert result == EncodedVideo(path=video, size_bytes=len(b"encoded-video"))
        assert fake.spawned[0].cmd == transcoder.encode_command(source, video)

    async def test_nonzero_exit(self, transcoder, files):
        source, video, _ = files
        with patch(EXEC, side_effect=_fake_ffmpeg(1, b"Invalid data found")):
            with pytest.raises(TranscodeError) as exc_info:
                await transcoder.encode(source, video)

        assert exc_info.value.kind == TranscodeError.ENCODE_FAILED
        assert exc_info.value.returncode == 1
        assert "Invalid data found" in exc_info.value.stderr

    async def test_timeout_kills_process(self, files):
        source, video, _ = files
        transcoder = FFmpegTranscoder(ffmpeg_path="ffmpeg", timeout_seconds=0.05)
        fake = _fake_ffmpeg(hang=True)
        with patch(EXEC, side_effect=fake):
            with pytest.raises(TranscodeError) as exc_info:
                await transcoder.encode(source, video)

        assert exc_info.value.kind == TranscodeError.ENCODE_FAILED
        assert "timed out" in exc_info.value.reason
        assert fake.spawned[0].killed is True

    async def test_cancellation_kills_process(self, transcoder, files):
        source, video, _ = files
        fake = _fake_ffmpeg(hang=True)
        with patch(EXEC, side_effect=fake):
            task = asyncio.create_task(transcoder.encode(source, video))
            await asyncio.sleep(0.01)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        assert fake.spawned[0].killed is True
        assert not video.exists()

    async def test_missing_binary(self, transcoder, files):
        source, video, _ = files
        with patch(EXEC, side_effect=FileNotFoundError("ffmpeg")):
            with pytest.raises(TranscodeError) as exc_info:
                await transcoder.encode(source, video)

        assert "not found" in exc_info.value.reason

    async def test_stderr_tail_is_bounded(self, transcoder, files):
        source, video, _ = files
        with patch(EXEC, side_effect=_fake_ffmpeg(1, b"x" * 10_000 + b"END")):
            with pytest.raises(TranscodeError) as exc_info:
                await transcoder.encode(source, video)

        assert len(exc_info.value.stderr) == 2000
        assert exc_info.value.stderr.endswith("END")


class TestExtractFrame:
    """Tests for FFmpegTranscoder.extract_frame."""

    async def test_success_reports_dimensions(self, transcoder, files):
        source, _, thumb = files
        with patch(EXEC, side_effect=_fake_ffmpeg()):
            frame = await transcoder.extract_frame(source, thumb)

        assert frame == ExtractedFrame(path=thumb, width=64, height=36)

    async def test_nonzero_exit(self, transcoder, files):
        source, _, thumb = files
        with patch(EXEC, side_effect=_fake_ffmpeg(1)):
            with pytest.raises(TranscodeError) as exc_info:
                await transcoder.extract_frame(source, thumb)

        assert exc_info.value.kind == TranscodeError.THUMBNAIL_FAILED

    async def test_unreadable_output(self, transcoder, files):
        source, _, thumb = files
        with patch(EXEC, side_effect=_fake_ffmpeg(output=b"not an image")):
            with pytest.raises(ProcessingError):
                await transcoder.extract_frame(source, thumb)


class TestTranscode:
    """Tests for the composed transcode operation."""

    async def test_runs_both_invocations(self, transcoder, files):
        source, video, thumb = files
        fake = _fake_ffmpeg()
        with patch(EXEC, side_effect=fake):
            output = await transcoder.transcode(source, video, thumb)

        assert len(fake.spawned) == 2
        assert output.video.path == video
        assert output.thumbnail.path == thumb

    async def test_sequential_mode(self, transcoder, files):
        source, video, thumb = files
        fake = _fake_ffmpeg()
        with patch(EXEC, side_effect=fake):
            await transcoder.transcode(source, video, thumb, concurrent=False)

        assert [process.cmd[-1] for process in fake.spawned] == [
            str(video),
            str(thumb),
        ]

    async def test_cancellation_kills_both_invocations(self, transcoder, files):
        source, video, thumb = files
        fake = _fake_ffmpeg(hang=True)
        with patch(EXEC, side_effect=fake):
            task = asyncio.create_task(transcoder.transcode(source, video, thumb))
            await asyncio.sleep(0.01)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        assert [process.killed for process in fake.spawned] == [True, True]


class _RecordingTranscoder(TranscoderBase):
    """Stub whose invocations fail or succeed on demand."""

    def __init__(self, encode_error=None, frame_error=None):
        self.encode_error = encode_error
        self.frame_error = frame_error
        self.finished: list[str] = []

    async def encode(self, input_path, output_path):
        await asyncio.sleep(0.01)
        self.finished.append("encode")
        if self.encode_error:
            raise self.encode_error
        return EncodedVideo(path=output_path, size_bytes=1)

    async def extract_frame(self, input_path, output_path):
        await asyncio.sleep(0.05)
        self.finished.append("extract_frame")
        if self.frame_error:
            raise self.frame_error
        return ExtractedFrame(path=output_path, width=1, height=1)


class TestTranscodeFailureOrdering:
    """Both invocations finish before a failure surfaces."""

    async def test_other_invocation_awaited_before_raising(self):
        stub = _RecordingTranscoder(
            encode_error=TranscodeError(TranscodeError.ENCODE_FAILED, "bad input")
        )

        with pytest.raises(TranscodeError):
            await stub.transcode(Path("in"), Path("out.mp4"), Path("t.jpg"))

        assert stub.finished == ["encode", "extract_frame"]

    async def test_encode_failure_takes_precedence(self):
        stub = _RecordingTranscoder(
            encode_error=TranscodeError(TranscodeError.ENCODE_FAILED, "a"),
            frame_error=TranscodeError(TranscodeError.THUMBNAIL_FAILED, "b"),
        )

        with pytest.raises(TranscodeError) as exc_info:
            await stub.transcode(Path("in"), Path("out.mp4"), Path("t.jpg"))

        assert exc_info.value.kind == TranscodeError.ENCODE_FAILED


class TestInspectImage:
    """Tests for inspect_image."""

    def test_bytes(self):
        assert inspect_image(_jpeg_bytes((10, 20))) == (10, 20)

    def test_invalid_bytes(self):
        with pytest.raises(ProcessingError):
            inspect_image(b"\x00\x01garbage")
