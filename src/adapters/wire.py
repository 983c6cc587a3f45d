"""Wire format mapping.

Response bodies are validated with a Pydantic model generated per kind from
its field descriptors, so every kind shares one decoding path. Absent keys and
JSON null decode to the wire zero value, mirroring the service's own
conventions; null-normalization happens later, in the engine.
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field, ValidationError, create_model
from pydantic.config import ConfigDict

from core.domain.models import RemoteRecord
from core.domain.schema import FieldType, ResourceSchema
from core.domain.settings_map import normalize
from core.errors import TransportError


def _as_text(value: Any) -> Any:
    # Numeric identifiers are common in the API; booleans are not text.
    if value is None:
        return ""
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


def _as_bool(value: Any) -> Any:
    return False if value is None else value


def _as_settings(value: Any) -> Any:
    return {} if value is None else value


WireText = Annotated[str, BeforeValidator(_as_text)]
WireBool = Annotated[bool, BeforeValidator(_as_bool)]
WireSettings = Annotated[dict[str, Any], BeforeValidator(_as_settings)]

_WIRE_TYPES: dict[FieldType, Any] = {
    FieldType.STRING: WireText,
    FieldType.BOOLEAN: WireBool,
    FieldType.SETTINGS: WireSettings,
}


@lru_cache(maxsize=None)
def wire_model(schema: ResourceSchema) -> type[BaseModel]:
    """Build (once per kind) the Pydantic model for a response body."""

    definitions: dict[str, Any] = {
        "id": (Annotated[str, BeforeValidator(_as_text), Field(min_length=1)], ...),
    }
    for descriptor in schema.fields:
        definitions[descriptor.name] = (
            _WIRE_TYPES[descriptor.type],
            Field(default=descriptor.zero_value, alias=descriptor.wire_name),
        )
    name = "".join(part.capitalize() for part in schema.kind.value.split("_")) + "Wire"
    return create_model(  # type: ignore[call-overload]
        name,
        __config__=ConfigDict(extra="ignore", populate_by_name=True),
        **definitions,
    )


def decode_record(schema: ResourceSchema, body: str) -> RemoteRecord:
    """Decode a success body into a `RemoteRecord`."""

    try:
        payload = json.loads(body)
        model = wire_model(schema).model_validate(payload)
    except (ValueError, ValidationError) as exc:
        raise TransportError(f"failed to decode response: {exc}") from exc

    data = model.model_dump(by_alias=False)
    identifier = data.pop("id")
    return RemoteRecord(kind=schema.kind, id=identifier, values=data)


def encode_request(schema: ResourceSchema, request: dict[str, Any]) -> dict[str, Any]:
    """Map local field names onto wire names.

    Fields missing from `request` (or null) are omitted from the body; an
    explicit empty string is sent as-is.
    """

    body: dict[str, Any] = {}
    for descriptor in schema.client_fields:
        value = request.get(descriptor.name)
        if value is None:
            continue
        if descriptor.type is FieldType.SETTINGS:
            value = normalize(value)
        body[descriptor.wire_name] = value
    return body
