"""PostgREST implementation of the metadata store."""

import time
from typing import Any

import httpx

from video_service.commons.infrastructure.blob.base import HealthStatus
from video_service.commons.infrastructure.metadata.base import (
    MetadataStoreBase,
    RecordNotFoundError,
)
from video_service.commons.telemetry import get_logger
from video_service.domain.exceptions import MetadataStoreError


class PostgrestMetadataStore(MetadataStoreBase):
    """Metadata store reached through a PostgREST endpoint.

    Supabase exposes PostgREST under ``{url}/rest/v1``. Filters use the
    ``{column}=eq.{value}`` query syntax and procedures live under
    ``/rpc/{name}``.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        schema_name: str | None = None,
        timeout_seconds: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the PostgREST client.

        Args:
            url: Base URL of the Supabase project (``/rest/v1`` is appended).
            api_key: Service API key, sent as ``apikey`` and bearer token.
            schema_name: Optional non-default schema (profile headers).
            timeout_seconds: Request timeout.
            client: Optional preconfigured HTTP client (used by tests).
        """
        self._rest_url = f"{url.rstrip('/')}/rest/v1"
        self._api_key = api_key
        self._schema_name = schema_name
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)
        self._logger = get_logger(__name__)

    def _headers(self, prefer: str | None = None) -> dict[str, str]:
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
        }
        if self._schema_name:
            headers["Accept-Profile"] = self._schema_name
            headers["Content-Profile"] = self._schema_name
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method,
                f"{self._rest_url}/{path}",
                params=params,
                json=json,
                headers=self._headers(prefer),
            )
        except httpx.HTTPError as e:
            raise MetadataStoreError(operation, None, str(e)) from e

        if not response.is_success and response.status_code != 406:
            self._logger.error(
                "Metadata store request failed",
                extra={
                    "operation": operation,
                    "status_code": response.status_code,
                    "body": response.text,
                },
            )
            raise MetadataStoreError(operation, response.status_code, response.text)
        return response

    @staticmethod
    def _rows(response: httpx.Response) -> list[dict[str, Any]]:
        # 406 is PostgREST's answer to a single-object request matching nothing.
        if response.status_code == 406 or not response.content:
            return []
        data = response.json()
        if isinstance(data, dict):
            return [data]
        return list(data)

    async def get_by_column(
        self,
        table: str,
        column: str,
        value: Any,
    ) -> dict[str, Any]:
        """Fetch the single row whose ``column`` equals ``value``."""
        response = await self._request(
            f"select {table}",
            "GET",
            table,
            params={column: f"eq.{value}", "select": "*"},
        )
        rows = self._rows(response)
        if not rows:
            raise RecordNotFoundError(table, column, value)
        return rows[0]

    async def list_ordered(
        self,
        table: str,
        order: str,
    ) -> list[dict[str, Any]]:
        """List all rows of a table in the given order."""
        response = await self._request(
            f"list {table}",
            "GET",
            table,
            params={"select": "*", "order": order},
        )
        return self._rows(response)

    async def insert(
        self,
        table: str,
        row: dict[str, Any],
    ) -> dict[str, Any]:
        """Insert a row and return the stored representation."""
        response = await self._request(
            f"insert {table}",
            "POST",
            table,
            json=row,
            prefer="return=representation",
        )
        rows = self._rows(response)
        # Stores configured without representation echo nothing back.
        return rows[0] if rows else dict(row)

    async def update(
        self,
        table: str,
        column: str,
        value: Any,
        patch: dict[str, Any],
    ) -> dict[str, Any]:
        """Apply ``patch`` to the matching row and return it."""
        response = await self._request(
            f"update {table}",
            "PATCH",
            table,
            params={column: f"eq.{value}"},
            json=patch,
            prefer="return=representation",
        )
        rows = self._rows(response)
        if not rows:
            raise RecordNotFoundError(table, column, value)
        return rows[0]

    async def delete(
        self,
        table: str,
        column: str,
        value: Any,
    ) -> int:
        """Delete matching rows and return how many were removed."""
        response = await self._request(
            f"delete {table}",
            "DELETE",
            table,
            params={column: f"eq.{value}"},
            prefer="return=representation",
        )
        return len(self._rows(response))

    async def call_procedure(
        self,
        name: str,
        params: dict[str, Any],
    ) -> Any:
        """Invoke ``rpc/{name}`` with JSON arguments."""
        response = await self._request(
            f"rpc {name}",
            "POST",
            f"rpc/{name}",
            json=params,
        )
        if not response.content:
            return None
        return response.json()

    async def health_check(self) -> HealthStatus:
        """Check that the REST endpoint answers."""
        start = time.perf_counter()
        try:
            response = await self._client.get(
                f"{self._rest_url}/",
                headers=self._headers(),
            )
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=response.is_success,
                latency_ms=latency_ms,
                message=(
                    "PostgREST is healthy"
                    if response.is_success
                    else f"PostgREST returned {response.status_code}"
                ),
                details={"url": self._rest_url},
            )
        except httpx.HTTPError as e:
            latency_ms = (time.perf_counter() - start) * 1000
            return HealthStatus(
                healthy=False,
                latency_ms=latency_ms,
                message=f"PostgREST health check failed: {e}",
                details={"url": self._rest_url, "error": str(e)},
            )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
