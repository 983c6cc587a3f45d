"""httpx wrapper.

Why a wrapper:
- Standardizes headers (auth, JSON content type) and timeouts for every call.
- Makes testing easy: gateways only see the `Transport` protocol.
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from core.config import ClientConfig
from core.errors import TransportError
from core.interfaces.transport import Transport, TransportResponse
from core.logging import get_logger

logger = get_logger(__name__)


def build_async_client(
    config: ClientConfig,
    *,
    extra_headers: dict[str, str] | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` bound to the API base URL."""

    headers: dict[str, str] = {
        "Authorization": f"Token {config.api_token}",
        "Content-Type": "application/json",
        "Accept": "application/json",
        "User-Agent": config.user_agent,
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        base_url=config.base_url,
        timeout=httpx.Timeout(config.timeout_seconds),
        headers=headers,
    )


def _check_base_url(base_url: str) -> None:
    try:
        url = httpx.URL(base_url)
    except (httpx.InvalidURL, TypeError) as exc:
        raise TransportError(f"invalid base URL {base_url!r}: {exc}") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise TransportError(f"invalid base URL {base_url!r}: expected http(s)://host[/path]")


class HttpxTransport(Transport):
    """Authenticated JSON transport.

    A fresh client is opened per request and closed before `send` returns,
    so the response body is always read and released.
    """

    def __init__(self, config: ClientConfig) -> None:
        self._config = config

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def send(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
    ) -> TransportResponse:
        _check_base_url(self._config.base_url)

        content: bytes | None = None
        if body is not None:
            try:
                content = json.dumps(body).encode("utf-8")
            except (TypeError, ValueError) as exc:
                raise TransportError(f"failed to marshal request body: {exc}") from exc

        # Relative paths keep any path prefix of the base URL.
        relative = path.lstrip("/")
        try:
            async with build_async_client(self._config) as client:
                response = await client.request(method, relative, content=content)
        except httpx.HTTPError as exc:
            raise TransportError(f"failed to perform request: {exc}") from exc
        except httpx.InvalidURL as exc:
            raise TransportError(f"failed to create request: {exc}") from exc

        logger.debug("api_request", method=method, path=path, status=response.status_code)
        return TransportResponse(status_code=response.status_code, body=response.text)
