"""REST gateway: one instance per resource kind.

Every kind follows the same contract against `{collection}` and
`{collection}/{id}`, so a single class parameterized by a `ResourceSchema`
serves all six kinds.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError
from pydantic.config import ConfigDict

from adapters.wire import decode_record, encode_request
from core.domain.models import RemoteRecord
from core.domain.schema import ResourceSchema
from core.errors import ApiError, NotFoundError
from core.interfaces.gateway import ResourceGateway
from core.interfaces.transport import Transport, TransportResponse


class ErrorPayload(BaseModel):
    """Optional `{error, message, code}` body returned on failures."""

    model_config = ConfigDict(extra="ignore")

    error: str | None = Field(default=None, description="Short error identifier.")
    message: str | None = Field(default=None, description="Human readable message.")
    code: str | int | None = Field(default=None, description="Service specific error code.")


def extract_error_message(body: str) -> str:
    """Pick `message`, then `error`, then fall back to the raw body text."""

    try:
        payload = ErrorPayload.model_validate_json(body)
    except ValidationError:
        return body
    return payload.message or payload.error or body


def raise_for_status(response: TransportResponse) -> None:
    if response.status_code >= 400:
        raise ApiError(response.status_code, extract_error_message(response.body))


class RestGateway(ResourceGateway):
    def __init__(self, schema: ResourceSchema, transport: Transport) -> None:
        self.schema = schema
        self._transport = transport

    def _not_found(self, identifier: str) -> NotFoundError:
        return NotFoundError(self.schema.kind.label(), identifier)

    async def create(self, request: dict[str, Any]) -> RemoteRecord:
        response = await self._transport.send(
            "POST", self.schema.collection_path, encode_request(self.schema, request)
        )
        raise_for_status(response)
        return decode_record(self.schema, response.body)

    async def get(self, identifier: str) -> RemoteRecord:
        response = await self._transport.send("GET", self.schema.item_path(identifier))
        if response.status_code == 404:
            raise self._not_found(identifier)
        raise_for_status(response)
        return decode_record(self.schema, response.body)

    async def update(self, identifier: str, request: dict[str, Any]) -> RemoteRecord:
        response = await self._transport.send(
            "PUT", self.schema.item_path(identifier), encode_request(self.schema, request)
        )
        if response.status_code == 404:
            raise self._not_found(identifier)
        raise_for_status(response)
        return decode_record(self.schema, response.body)

    async def delete(self, identifier: str) -> bool:
        response = await self._transport.send("DELETE", self.schema.item_path(identifier))
        if response.status_code == 404:
            # Already deleted or never existed.
            return False
        raise_for_status(response)
        return True
