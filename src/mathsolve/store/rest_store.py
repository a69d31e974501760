"""Record store for the hosted backend.

All calls go through the same-origin proxy path (``/supabase-proxy`` by
default) instead of the backend's own domain, so only one host is ever
contacted. The REST dialect is PostgREST's:

- filters become query parameters (``difficulty=gte.4``)
- ordering is ``order=total_score.desc``
- upserts POST with ``on_conflict`` and ``Prefer: resolution=merge-duplicates``
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import structlog

from mathsolve.store.base import (
    Filter,
    Record,
    RecordStore,
    StoreError,
    check_columns,
)

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 20.0


class RestRecordStore(RecordStore):
    """Record store speaking PostgREST through the proxy path.

    Args:
        base_url: Origin serving the proxy (e.g. ``http://localhost:5173``)
        api_key: Anonymous API key sent as ``apikey`` and bearer token
        proxy_path: Path prefix forwarded to the backend
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport (used by tests)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None,
        proxy_path: str = "/supabase-proxy",
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.rest_url = f"{base_url.rstrip('/')}/{proxy_path.strip('/')}/rest/v1"
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    def _headers(self, prefer: str | None = None) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(
        self,
        method: str,
        table: str,
        params: list[tuple[str, str]] | None = None,
        body: Any = None,
        prefer: str | None = None,
    ) -> httpx.Response:
        url = f"{self.rest_url}/{table}"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    content=json.dumps(body) if body is not None else None,
                    headers=self._headers(prefer),
                )
        except httpx.HTTPError as e:
            logger.warning("store.request_failed", table=table, method=method, error=str(e))
            raise StoreError(f"Request to {table} failed: {e}", table=table) from e

        if response.status_code >= 400:
            message = _error_message(response)
            logger.warning(
                "store.request_rejected",
                table=table,
                method=method,
                status=response.status_code,
                error=message,
            )
            raise StoreError(message, table=table)

        return response

    async def select(
        self,
        table: str,
        filters: list[Filter] | tuple[Filter, ...] = (),
        *,
        columns: list[str] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Record]:
        check_columns(table, [f.column for f in filters] + list(columns or []))
        if order_by:
            check_columns(table, [order_by])

        params = [("select", ",".join(columns) if columns else "*")]
        params.extend(_filter_params(filters))
        if order_by:
            params.append(("order", f"{order_by}.{'desc' if descending else 'asc'}"))
        if limit is not None:
            params.append(("limit", str(limit)))

        response = await self._request("GET", table, params=params)
        data = _json_body(response, table)
        if not isinstance(data, list):
            raise StoreError(f"Unexpected response for {table}", table=table)
        return data

    async def insert(self, table: str, record: Record) -> None:
        check_columns(table, list(record))
        await self._request("POST", table, body=record, prefer="return=minimal")
        logger.debug("store.inserted", table=table)

    async def update(
        self,
        table: str,
        filters: list[Filter] | tuple[Filter, ...],
        values: Record,
    ) -> int:
        check_columns(table, list(values) + [f.column for f in filters])
        if not values:
            return 0

        response = await self._request(
            "PATCH",
            table,
            params=_filter_params(filters),
            body=values,
            prefer="return=representation",
        )
        rows = _json_body(response, table) if response.content else []
        logger.debug("store.updated", table=table, rows=len(rows))
        return len(rows)

    async def upsert(
        self,
        table: str,
        record: Record,
        on_conflict: tuple[str, ...],
    ) -> None:
        check_columns(table, list(record) + list(on_conflict))
        await self._request(
            "POST",
            table,
            params=[("on_conflict", ",".join(on_conflict))],
            body=record,
            prefer="resolution=merge-duplicates,return=minimal",
        )
        logger.debug("store.upserted", table=table)


def _format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _quote(value: Any) -> str:
    """Double-quote a value for an in.() list, escaping backslashes and quotes."""
    text = _format_value(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


def _filter_params(filters: list[Filter] | tuple[Filter, ...]) -> list[tuple[str, str]]:
    """Translate filters to PostgREST query parameters."""
    params = []
    for f in filters:
        if f.op == "in":
            values = ",".join(_quote(v) for v in f.value)
            params.append((f.column, f"in.({values})"))
        elif f.op == "eq" and f.value is None:
            params.append((f.column, "is.null"))
        else:
            params.append((f.column, f"{f.op}.{_format_value(f.value)}"))
    return params


def _json_body(response: httpx.Response, table: str) -> Any:
    """Decode a JSON response body.

    Raises:
        StoreError: If the body is not JSON (e.g. a proxy serving HTML)
    """
    try:
        return response.json()
    except ValueError as e:
        logger.warning("store.invalid_json", table=table, status=response.status_code)
        raise StoreError(f"Invalid JSON from {table}", table=table) from e


def _error_message(response: httpx.Response) -> str:
    """Extract a readable message from an error response."""
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(payload, dict):
        return str(payload.get("message") or payload.get("error") or payload)
    return str(payload)
