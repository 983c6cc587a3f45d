"""HTTP transport contract.

The engine and gateways only need "send a request, get status and body".
Status classification belongs to the gateways, not to the transport.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class TransportResponse:
    status_code: int
    body: str


@runtime_checkable
class Transport(Protocol):
    """Minimal authenticated JSON transport.

    Implementations raise `core.errors.TransportError` when the request
    cannot be sent or the response cannot be read.
    """

    async def send(
        self,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
    ) -> TransportResponse:
        ...
