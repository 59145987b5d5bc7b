"""HTTP gateway to the multi-agent RAG backend."""
from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote, urlparse

import httpx

logger = logging.getLogger(__name__)

UNREACHABLE_MESSAGE = "Backend unreachable"


class GatewayError(RuntimeError):
    """Raised when a backend call does not complete successfully."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _detail_text(detail: Any) -> str | None:
    if detail is None or detail == "":
        return None
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list):
        # FastAPI validation errors: [{"loc": [...], "msg": "..."}]
        parts = [str(item.get("msg") or item) if isinstance(item, dict) else str(item) for item in detail]
        return "; ".join(part for part in parts if part) or None
    if isinstance(detail, dict):
        return str(detail.get("message") or detail.get("msg") or detail)
    return str(detail)


def error_message(response: httpx.Response) -> str:
    """Build a human-readable message for a non-success response."""

    fallback = f"Server error {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        return _detail_text(body.get("detail")) or fallback
    return fallback


class AsyncGateway:
    """Uniform async wrapper around the backend endpoints.

    Every call either returns the parsed body or raises :class:`GatewayError`;
    transport errors and timeouts are normalised the same way.
    """

    def __init__(
        self,
        api_base: str,
        *,
        timeout: float = 120.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        parsed = urlparse(api_base)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("api_base must include scheme and host")

        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None

    @property
    def api_base(self) -> str:
        return self._api_base

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _url(self, endpoint: str) -> str:
        return f"{self._api_base}/{endpoint.lstrip('/')}"

    async def _send(self, method: str, endpoint: str, payload: Any | None = None) -> httpx.Response:
        url = self._url(endpoint)
        logger.debug("%s %s", method, url)
        try:
            if payload is None:
                return await self._client.request(method, url, timeout=self._timeout)
            return await self._client.request(method, url, json=payload, timeout=self._timeout)
        except httpx.TimeoutException as exc:
            logger.warning("%s %s timed out after %ss", method, url, self._timeout)
            raise GatewayError(f"Request timed out after {self._timeout:g}s") from exc
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise GatewayError(f"Could not reach backend: {exc}") from exc

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise GatewayError("Invalid response from server", status_code=response.status_code) from exc

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    async def call(self, endpoint: str, payload: Any) -> Any:
        """POST ``payload`` as JSON and return the decoded body."""

        response = await self._send("POST", endpoint, payload)
        if not response.is_success:
            message = error_message(response)
            logger.warning("POST %s returned %s: %s", endpoint, response.status_code, message)
            raise GatewayError(message, status_code=response.status_code)
        return self._json(response)

    async def probe(self, endpoint: str) -> Any:
        """GET a read-only endpoint; any failure reports the backend as unreachable."""

        try:
            response = await self._send("GET", endpoint)
        except GatewayError as exc:
            raise GatewayError(UNREACHABLE_MESSAGE) from exc
        if not response.is_success:
            raise GatewayError(UNREACHABLE_MESSAGE, status_code=response.status_code)
        try:
            return response.json()
        except ValueError as exc:
            raise GatewayError(UNREACHABLE_MESSAGE, status_code=response.status_code) from exc

    async def fetch(self, namespace: str, name: str) -> bytes:
        """Download raw bytes for ``name`` under ``namespace`` (e.g. ``exports``)."""

        endpoint = f"{namespace.strip('/')}/{quote(name, safe='')}"
        try:
            response = await self._send("GET", endpoint)
        except GatewayError as exc:
            raise GatewayError(UNREACHABLE_MESSAGE) from exc
        if not response.is_success:
            raise GatewayError(f"Could not fetch {name}", status_code=response.status_code)
        return response.content

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["AsyncGateway", "GatewayError", "UNREACHABLE_MESSAGE", "error_message"]
