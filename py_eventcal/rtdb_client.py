"""REST client for a Firebase-style Realtime Database.

The database exposes every path as ``<base_url>/<path>.json``. Reads return
``null`` for missing paths, ``POST`` appends a child under a generated key,
and a ``PATCH`` on the root applies a multi-location update in one write.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any

import httpx

from .debug import log_rtdb_request, log_rtdb_response
from .internal import PersistenceError

EVENTCAL_DATABASE_URL = os.getenv("EVENTCAL_DATABASE_URL")
EVENTCAL_DATABASE_SECRET = os.getenv("EVENTCAL_DATABASE_SECRET")


@dataclass
class RealtimeDatabaseConfig:
    """Configuration for the Realtime Database client."""

    base_url: str = EVENTCAL_DATABASE_URL or "http://localhost:9000"
    # Database secret or ID token, sent as the ``auth`` query parameter
    auth_token: str | None = EVENTCAL_DATABASE_SECRET
    timeout: float = 30.0  # Request timeout in seconds


class RealtimeDatabaseClient:
    """Async client for the Realtime Database REST API."""

    def __init__(
        self,
        config: RealtimeDatabaseConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        debug: bool = False,
    ) -> None:
        """Initialize the client.

        Args:
            config: Database configuration (uses default if None)
            transport: Optional httpx transport (e.g., a MockTransport in tests)
            debug: Log every request/response on the ``py_eventcal.rtdb`` logger
        """
        self.config = config or RealtimeDatabaseConfig()
        self.debug = debug
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout,
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client and cleanup resources."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> RealtimeDatabaseClient:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def _make_request(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        """Make a request and decode the JSON response.

        Args:
            method: HTTP method (GET, PUT, POST, PATCH, DELETE)
            path: Database path without ``.json`` (e.g., "events/abc")
            body: JSON body for write requests
            params: Additional query parameters

        Returns:
            Decoded JSON response (None for missing paths)

        Raises:
            PersistenceError: If the request fails
        """
        client = await self._get_http_client()

        query = dict(params or {})
        if self.config.auth_token:
            query["auth"] = self.config.auth_token

        url = f"/{path.strip('/')}.json" if path.strip("/") else "/.json"

        if self.debug:
            log_rtdb_request(method, url, {k: v for k, v in query.items() if k != "auth"}, body)

        try:
            response = await client.request(
                method,
                url,
                params=query,
                content=json.dumps(body) if body is not None else None,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise PersistenceError(e) from e

        data = response.json() if response.content else None

        if self.debug:
            log_rtdb_response(response.status_code, data)

        return data

    async def get(self, path: str) -> Any:
        """Read the value at ``path`` (None if absent)."""
        return await self._make_request("GET", path)

    async def put(self, path: str, value: Any) -> None:
        """Replace the value at ``path``."""
        await self._make_request("PUT", path, body=value)

    async def post(self, path: str, value: Any) -> str:
        """Append ``value`` under a server-generated key.

        Returns:
            The generated key
        """
        data = await self._make_request("POST", path, body=value)
        if not isinstance(data, dict) or "name" not in data:
            raise PersistenceError(Exception(f"unexpected push response: {data!r}"))
        return str(data["name"])

    async def patch(self, path: str, values: dict[str, Any]) -> None:
        """Merge ``values`` into the object at ``path``.

        On the root path the keys may be nested paths, which makes this a
        multi-location update; a None value deletes that location.
        """
        await self._make_request("PATCH", path, body=values)

    async def delete(self, path: str) -> None:
        """Delete the value at ``path``."""
        await self._make_request("DELETE", path)

    async def query_equal(self, path: str, child: str, value: Any) -> dict[str, Any]:
        """Children of ``path`` whose ``child`` equals ``value``.

        Requires an ``.indexOn`` rule for ``child`` on the server.
        """
        data = await self._make_request(
            "GET",
            path,
            params={"orderBy": json.dumps(child), "equalTo": json.dumps(value)},
        )
        return dict(data or {})
