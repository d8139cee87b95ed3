"""
Async Keystone identity v2 service client.

This is the generic transport used to issue identity calls: it owns the
``httpx.AsyncClient``, sends JSON bodies, and turns unexpected status codes
into ``KeystoneAPIError``. It knows nothing about tokens; see
``keystone_mcp.tokens`` for request construction and response decoding.
"""
from __future__ import annotations

import time
from typing import Any, Iterable, Optional

import httpx
import structlog

from keystone_mcp.config import Settings
from keystone_mcp.errors import KeystoneAPIError

log = structlog.get_logger(__name__)

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class KeystoneClient:
    """Async context-manager wrapper around the Keystone v2.0 REST API."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        # trailing slash so relative paths resolve under /v2.0/
        self._base_url = settings.keystone_url.rstrip("/") + "/"
        self._client: Optional[httpx.AsyncClient] = None

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    async def __aenter__(self) -> "KeystoneClient":
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Accept": "application/json"},
            verify=self._settings.ssl_verify,
            timeout=self._settings.timeout,
        )
        return self

    async def __aexit__(self, *_: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client_or_raise(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("KeystoneClient must be used as an async context manager")
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        ok_codes: Iterable[int],
        **kwargs: Any,
    ) -> Any:
        """Make a request and return the decoded JSON body."""
        client = self._client_or_raise()
        t0 = time.monotonic()
        response = await client.request(method, path, **kwargs)
        elapsed = round((time.monotonic() - t0) * 1000)

        log.info(
            "keystone.api_call",
            method=method,
            path=path,
            status=response.status_code,
            elapsed_ms=elapsed,
        )

        if response.status_code not in tuple(ok_codes):
            if response.status_code == 401:
                raise KeystoneAPIError(401, "Unauthorized: check username, password and tenant")
            if response.status_code == 403:
                raise KeystoneAPIError(403, "Forbidden: user may not be scoped to this tenant")
            if response.status_code == 404:
                raise KeystoneAPIError(404, f"Not found: {path} (is the URL a v2.0 identity root?)")
            raise KeystoneAPIError(response.status_code, response.text[:500])

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise KeystoneAPIError(response.status_code, f"response is not valid JSON: {e}") from e

    async def post(
        self,
        path: str,
        body: dict[str, Any],
        ok_codes: Iterable[int] = (200, 203),
    ) -> Any:
        """POST *body* as JSON to *path* (relative to the identity root)."""
        return await self._request("POST", path, ok_codes, json=body, headers=JSON_HEADERS)
