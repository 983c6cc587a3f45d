"""Composition root.

Builds the immutable client configuration, the transport and one
`Reconciler` per resource kind. The only object shared between gateways is
the `ClientConfig`.
"""

from __future__ import annotations

from adapters.gateway import RestGateway
from adapters.http_client import HttpxTransport
from core.config import AppSettings, ClientConfig
from core.domain.kinds import ResourceKind
from core.domain.schema import get_schema
from core.interfaces.transport import Transport
from core.services.reconciler import Reconciler


class Provider:
    def __init__(self, config: ClientConfig, transport: Transport | None = None) -> None:
        self.config = config
        self._transport = transport or HttpxTransport(config)

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings | None = None,
        *,
        api_token: str | None = None,
        base_url: str | None = None,
    ) -> "Provider":
        return cls(ClientConfig.from_settings(settings, api_token=api_token, base_url=base_url))

    def gateway(self, kind: ResourceKind) -> RestGateway:
        return RestGateway(get_schema(kind), self._transport)

    def reconciler(self, kind: ResourceKind) -> Reconciler:
        return Reconciler(self.gateway(kind))
