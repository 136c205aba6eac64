"""Unit tests for the staging area."""

import asyncio
import tempfile
import time
from pathlib import Path

import pytest

from video_service.domain.exceptions import StagingError
from video_service.infrastructure.staging import StagingArea


class _SlowPath(type(Path())):
    """Path whose writes take long enough to be cancelled midway."""

    def write_bytes(self, data):
        time.sleep(0.2)
        return super().write_bytes(data)


@pytest.fixture
def staging(tmp_path):
    return StagingArea(directory=tmp_path / "staging", prefix="test-")


class TestAcquire:
    """Tests for StagingArea.acquire."""

    async def test_yields_empty_writable_file(self, staging):
        async with staging.acquire(".mp4") as path:
            assert path.exists()
            assert path.stat().st_size == 0
            assert path.name.startswith("test-")
            assert path.suffix == ".mp4"
            path.write_bytes(b"data")

    async def test_removed_after_scope(self, staging):
        async with staging.acquire() as path:
            pass
        assert not path.exists()

    async def test_removed_on_error(self, staging):
        with pytest.raises(RuntimeError):
            async with staging.acquire() as path:
                raise RuntimeError("boom")
        assert not path.exists()

    async def test_removed_on_cancellation(self, staging):
        acquired = asyncio.Event()
        seen = []

        async def hold():
            async with staging.acquire() as path:
                seen.append(path)
                acquired.set()
                await asyncio.sleep(3600)

        task = asyncio.create_task(hold())
        await acquired.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert not seen[0].exists()

    async def test_tolerates_file_deleted_inside_scope(self, staging):
        async with staging.acquire() as path:
            path.unlink()
        assert not path.exists()

    async def test_unusable_directory_raises_staging_error(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x")
        staging = StagingArea(directory=blocker / "sub")

        with pytest.raises(StagingError):
            async with staging.acquire():
                pass


class TestStageJob:
    """Tests for StagingArea.stage_job."""

    async def test_three_distinct_files_cleaned_up(self, staging):
        async with staging.stage_job() as job:
            paths = [job.input_path, job.video_path, job.thumbnail_path]
            assert len(set(paths)) == 3
            assert all(p.exists() for p in paths)
            assert job.video_path.suffix == ".mp4"
            assert job.thumbnail_path.suffix == ".jpg"

        assert not any(p.exists() for p in paths)
        assert list(staging.directory.iterdir()) == []

    async def test_cleaned_up_on_error(self, staging):
        with pytest.raises(ValueError):
            async with staging.stage_job():
                raise ValueError("transcode failed")

        assert list(staging.directory.iterdir()) == []


class TestReadWrite:
    """Tests for staged byte helpers."""

    async def test_round_trip(self, staging):
        async with staging.acquire() as path:
            await staging.write(path, b"video bytes")
            assert await staging.read(path) == b"video bytes"

    async def test_read_missing_file_raises_staging_error(self, staging, tmp_path):
        with pytest.raises(StagingError):
            await staging.read(tmp_path / "missing.bin")

    async def test_cancelled_write_finishes_before_cleanup(self, staging):
        async def job():
            async with staging.acquire(".input") as path:
                await staging.write(_SlowPath(path), b"video bytes")

        task = asyncio.create_task(job())
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        await asyncio.sleep(0.3)
        assert list(staging.directory.iterdir()) == []

    def test_default_directory_is_system_temp(self):
        assert StagingArea().directory == Path(tempfile.gettempdir())
