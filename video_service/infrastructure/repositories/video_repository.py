"""Typed access to video records in the metadata store."""

from typing import Any

from video_service.commons.infrastructure.metadata import (
    MetadataStoreBase,
    RecordNotFoundError,
)
from video_service.domain.exceptions import MetadataStoreError, VideoNotFoundException
from video_service.domain.models import VideoArtifactPatch, VideoRecord


class VideoRepository:
    """Repository for :class:`VideoRecord` rows.

    Counters are only changed through store procedures, never through
    :meth:`set_artifact_urls`.
    """

    def __init__(
        self,
        store: MetadataStoreBase,
        table: str = "videos",
        increment_views_procedure: str = "increment_views",
        toggle_like_procedure: str = "toggle_like",
    ) -> None:
        self._store = store
        self._table = table
        self._increment_views = increment_views_procedure
        self._toggle_like = toggle_like_procedure

    async def get(self, video_id: str) -> VideoRecord:
        """Fetch a record by id.

        Raises:
            VideoNotFoundException: If no record has this id.
        """
        try:
            row = await self._store.get_by_column(self._table, "id", video_id)
        except RecordNotFoundError as e:
            raise VideoNotFoundException(video_id) from e
        return VideoRecord.model_validate(row)

    async def list_newest_first(self) -> list[VideoRecord]:
        """List all records ordered by creation time, newest first."""
        rows = await self._store.list_ordered(self._table, "created_at.desc")
        return [VideoRecord.model_validate(row) for row in rows]

    async def insert(self, record: VideoRecord) -> VideoRecord:
        """Insert a record and return it with store defaults applied."""
        row = await self._store.insert(self._table, record.to_insert_row())
        return VideoRecord.model_validate(row)

    async def set_artifact_urls(
        self,
        video_id: str,
        patch: VideoArtifactPatch,
    ) -> VideoRecord:
        """Point an existing record at its uploaded artifacts."""
        try:
            row = await self._store.update(
                self._table, "id", video_id, patch.to_row()
            )
        except RecordNotFoundError as e:
            raise VideoNotFoundException(video_id) from e
        return VideoRecord.model_validate(row)

    async def delete(self, video_id: str) -> None:
        """Delete a record.

        Raises:
            VideoNotFoundException: If no record has this id.
        """
        deleted = await self._store.delete(self._table, "id", video_id)
        if deleted == 0:
            raise VideoNotFoundException(video_id)

    async def increment_views(self, video_id: str) -> int:
        """Atomically add one view and return the new count."""
        result = await self._store.call_procedure(
            self._increment_views, {"video_id": video_id}
        )
        return _counter(self._increment_views, video_id, result)

    async def toggle_like(self, video_id: str) -> int:
        """Atomically toggle a like and return the new like count."""
        result = await self._store.call_procedure(
            self._toggle_like, {"video_id": video_id}
        )
        return _counter(self._toggle_like, video_id, result)


def _counter(procedure: str, video_id: str, result: Any) -> int:
    # Procedures return a bare integer, or null when the id matched no row.
    if result is None:
        raise VideoNotFoundException(video_id)
    if isinstance(result, list):
        result = result[0] if result else None
        if result is None:
            raise VideoNotFoundException(video_id)
    if isinstance(result, dict):
        result = next(iter(result.values()), None)
    if isinstance(result, bool) or not isinstance(result, int):
        raise MetadataStoreError(f"rpc {procedure}", 200, repr(result))
    return result
