"""Error taxonomy shared by transport, gateways and the reconciliation engine.

- `TransportError`: the request could not be sent or the response not read.
- `ApiError`: the remote service answered with status >= 400.
- `NotFoundError`: the remote service answered 404 for a specific object.
- `ConfigurationError`: the caller handed over something unusable; always
  raised before any request is issued.
"""

from __future__ import annotations


class ReconcileError(Exception):
    """Base class; carries optional operation/kind context for diagnostics."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.operation: str | None = None
        self.kind: str | None = None

    def annotate(self, *, operation: str, kind: str) -> "ReconcileError":
        """Attach the failing operation and resource kind (first one wins)."""

        if self.operation is None:
            self.operation = operation
            self.kind = kind
        return self

    def _detail(self) -> str:
        return self.message

    def __str__(self) -> str:
        detail = self._detail()
        if self.operation is None:
            return detail
        return f"[{self.kind} {self.operation}] {detail}"


class TransportError(ReconcileError):
    """Endpoint unreachable, malformed base address or unserializable body."""


class ApiError(ReconcileError):
    """Remote service rejected the request."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status

    def _detail(self) -> str:
        return f"API request failed with status {self.status}: {self.message}"


class NotFoundError(ApiError):
    """The remote object does not exist (HTTP 404)."""

    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(404, f"{kind} with ID {identifier} not found")
        self.identifier = identifier
        self.resource_kind = kind

    def _detail(self) -> str:
        return self.message


class ConfigurationError(ReconcileError):
    """Invalid desired record or client configuration."""


class InvalidTransitionError(ConfigurationError):
    """Operation requested from a record state that does not allow it."""
