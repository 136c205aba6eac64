"""Abstract base class for relational metadata store operations."""

from abc import ABC, abstractmethod
from typing import Any

from video_service.commons.infrastructure.blob.base import HealthStatus


class RecordNotFoundError(Exception):
    """Raised when a query that must match a row matched none."""

    def __init__(self, table: str, column: str, value: Any) -> None:
        self.table = table
        self.column = column
        self.value = value
        super().__init__(f"No row in {table} where {column} = {value}")


class MetadataStoreBase(ABC):
    """Abstract base class for the metadata store.

    Implementations should handle:
    - PostgREST / Supabase ``rest/v1``

    Non-success responses raise ``MetadataStoreError`` carrying the upstream
    status and body. Counter columns are only changed through
    ``call_procedure`` so that increments stay atomic server-side.
    """

    @abstractmethod
    async def get_by_column(
        self,
        table: str,
        column: str,
        value: Any,
    ) -> dict[str, Any]:
        """Fetch the single row whose ``column`` equals ``value``.

        Raises:
            RecordNotFoundError: If no row matches.
        """

    @abstractmethod
    async def list_ordered(
        self,
        table: str,
        order: str,
    ) -> list[dict[str, Any]]:
        """List all rows of a table.

        Args:
            table: Table name.
            order: Ordering expression, e.g. ``created_at.desc``.
        """

    @abstractmethod
    async def insert(
        self,
        table: str,
        row: dict[str, Any],
    ) -> dict[str, Any]:
        """Insert a row and return it as stored (with store defaults)."""

    @abstractmethod
    async def update(
        self,
        table: str,
        column: str,
        value: Any,
        patch: dict[str, Any],
    ) -> dict[str, Any]:
        """Apply ``patch`` to the row matching ``column = value``.

        Returns:
            The updated row.

        Raises:
            RecordNotFoundError: If no row matches.
        """

    @abstractmethod
    async def delete(
        self,
        table: str,
        column: str,
        value: Any,
    ) -> int:
        """Delete rows matching ``column = value``.

        Returns:
            Number of deleted rows.
        """

    @abstractmethod
    async def call_procedure(
        self,
        name: str,
        params: dict[str, Any],
    ) -> Any:
        """Invoke a stored procedure and return its decoded result."""

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Check service health."""

    @abstractmethod
    async def close(self) -> None:
        """Release pooled connections."""
