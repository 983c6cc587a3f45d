"""Null-normalization of remote records.

The remote API cannot tell "explicitly empty" from "never set" for fields
that use zero-value conventions. For fields with the `NULL_IF_ZERO` policy
the zero value always becomes local null; a user who configures an empty
string for such a field will therefore see it come back as null.
"""

from __future__ import annotations

from typing import Any

from core.domain.models import RemoteRecord
from core.domain.schema import FieldDescriptor, FieldType, Presence, ResourceSchema
from core.domain.settings_map import normalize


def local_value(descriptor: FieldDescriptor, raw: Any) -> Any:
    if raw is None:
        raw = descriptor.zero_value
    if descriptor.type is FieldType.SETTINGS:
        raw = normalize(raw)
    if descriptor.presence is Presence.NULL_IF_ZERO and raw == descriptor.zero_value:
        return None
    return raw


def local_values(schema: ResourceSchema, remote: RemoteRecord) -> dict[str, Any]:
    """Map every field of `schema` from the remote record, applying presence policies."""

    return {f.name: local_value(f, remote.values.get(f.name)) for f in schema.fields}
