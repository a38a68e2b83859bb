"""HTTP transport for GraphQL requests.

The body is always ``{"query": <text>}`` with the caller's original text.
Anything short of a 2xx JSON reply raises TransportError; callers never get
a cached stand-in for a failed request.
"""

from __future__ import annotations

import json
from types import TracebackType
from typing import Any

import httpx

from quell.core.errors import TransportError
from quell.core.logging import get_logger

log = get_logger(__name__)


class Transport:
    """Thin wrapper over ``httpx.AsyncClient``.

    Pass ``client`` to reuse an existing client (or a MockTransport-backed one
    in tests); otherwise one is created lazily and owned by this transport.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = 30.0,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def send(
        self,
        endpoint: str,
        query: str,
        *,
        method: str = "POST",
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Send ``query`` to ``endpoint`` and return the decoded JSON body."""
        client = self._get_client()
        log.debug("graphql_request", endpoint=endpoint, method=method)
        try:
            response = await client.request(
                method,
                endpoint,
                headers=headers,
                content=json.dumps({"query": query}),
            )
        except httpx.RequestError as e:
            log.warning("graphql_request_failed", endpoint=endpoint, error=str(e))
            raise TransportError.request_failed(endpoint, str(e)) from e

        if response.is_error:
            log.warning("graphql_bad_status", endpoint=endpoint, status=response.status_code)
            raise TransportError.bad_status(endpoint, response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise TransportError.invalid_json(endpoint, str(e)) from e
        if not isinstance(payload, dict):
            raise TransportError.invalid_json(endpoint, f"expected an object, got {type(payload).__name__}")
        return payload

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> Transport:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
