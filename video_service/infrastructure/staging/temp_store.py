"""Scoped staging files for transcode jobs."""

import asyncio
import contextlib
import os
import tempfile
from collections.abc import AsyncIterator, Callable
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

from video_service.commons.telemetry import get_logger
from video_service.domain.exceptions import StagingError

T = TypeVar("T")


@dataclass(frozen=True)
class StagedJob:
    """The three staging paths of one transcode job."""

    input_path: Path
    video_path: Path
    thumbnail_path: Path


class StagingArea:
    """Allocates temporary files that are removed when their scope ends.

    Every file handed out by :meth:`acquire` is unlinked on normal exit,
    on exception and on task cancellation alike.
    """

    def __init__(
        self,
        directory: str | Path | None = None,
        prefix: str = "video-service-",
    ) -> None:
        """Initialize the staging area.

        Args:
            directory: Directory for staging files. Defaults to the system
                temporary directory.
            prefix: Filename prefix of every staging file.
        """
        self._directory = Path(directory) if directory else None
        self._prefix = prefix
        self._logger = get_logger(__name__)

    @property
    def directory(self) -> Path:
        """Directory staging files are created in."""
        return self._directory or Path(tempfile.gettempdir())

    def _create(self, suffix: str) -> Path:
        try:
            if self._directory is not None:
                self._directory.mkdir(parents=True, exist_ok=True)
            fd, name = tempfile.mkstemp(
                suffix=suffix,
                prefix=self._prefix,
                dir=self._directory,
            )
            os.close(fd)
        except OSError as e:
            raise StagingError(f"cannot create staging file: {e}") from e
        return Path(name)

    def _remove(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            self._logger.warning(
                f"Failed to remove staging file: {e}",
                extra={"path": str(path)},
            )

    @asynccontextmanager
    async def acquire(self, suffix: str = "") -> AsyncIterator[Path]:
        """Yield a fresh, empty, writable staging file path.

        Args:
            suffix: Filename suffix, e.g. ``.mp4``. FFmpeg picks the output
                container from it.

        Raises:
            StagingError: If the filesystem cannot allocate the file.
        """
        path = self._create(suffix)
        try:
            yield path
        finally:
            self._remove(path)

    @asynccontextmanager
    async def stage_job(self) -> AsyncIterator[StagedJob]:
        """Yield input, encoded video and thumbnail paths for one job."""
        async with AsyncExitStack() as stack:
            input_path = await stack.enter_async_context(self.acquire(".input"))
            video_path = await stack.enter_async_context(self.acquire(".mp4"))
            thumbnail_path = await stack.enter_async_context(self.acquire(".jpg"))
            yield StagedJob(
                input_path=input_path,
                video_path=video_path,
                thumbnail_path=thumbnail_path,
            )

    async def write(self, path: Path, data: bytes) -> None:
        """Write ``data`` to a staging file off the event loop."""
        try:
            await _in_executor(path.write_bytes, data)
        except OSError as e:
            raise StagingError(f"cannot write {path.name}: {e}") from e

    async def read(self, path: Path) -> bytes:
        """Read a staging file off the event loop."""
        try:
            return await _in_executor(path.read_bytes)
        except OSError as e:
            raise StagingError(f"cannot read {path.name}: {e}") from e


async def _in_executor(func: Callable[..., T], *args: Any) -> T:
    future = asyncio.get_running_loop().run_in_executor(None, func, *args)
    try:
        return await asyncio.shield(future)
    except asyncio.CancelledError:
        # The thread cannot be interrupted; it finishes before the file is removed.
        with contextlib.suppress(Exception):
            await future
        raise
