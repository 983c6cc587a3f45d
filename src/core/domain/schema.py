"""Per-kind field descriptors.

One `ResourceSchema` per `ResourceKind` describes the collection path and the
field set. The reconciliation engine and the wire mapping are generic and are
parameterized only by this data.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote

from core.domain.kinds import ResourceKind


class FieldRole(str, Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"
    COMPUTED = "computed"


class FieldType(str, Enum):
    STRING = "string"
    BOOLEAN = "boolean"
    SETTINGS = "settings"


class Presence(str, Enum):
    """How a remote zero value maps onto the local record.

    `NULL_IF_ZERO`: `""`, `{}` or a missing key become local null.
    `PLAIN`: the remote value (or the wire zero value) is kept as-is.
    """

    NULL_IF_ZERO = "null_if_zero"
    PLAIN = "plain"


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    wire_name: str
    type: FieldType
    role: FieldRole
    presence: Presence = Presence.PLAIN
    description: str = ""

    @property
    def client_supplied(self) -> bool:
        return self.role is not FieldRole.COMPUTED

    @property
    def zero_value(self) -> object:
        if self.type is FieldType.BOOLEAN:
            return False
        if self.type is FieldType.SETTINGS:
            return {}
        return ""


@dataclass(frozen=True)
class ResourceSchema:
    kind: ResourceKind
    collection_path: str
    fields: tuple[FieldDescriptor, ...]

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    @property
    def client_fields(self) -> tuple[FieldDescriptor, ...]:
        return tuple(f for f in self.fields if f.client_supplied)

    @property
    def required_fields(self) -> tuple[FieldDescriptor, ...]:
        return tuple(f for f in self.fields if f.role is FieldRole.REQUIRED)

    def field(self, name: str) -> FieldDescriptor:
        for descriptor in self.fields:
            if descriptor.name == name:
                return descriptor
        raise KeyError(name)

    def item_path(self, identifier: str) -> str:
        return f"{self.collection_path}/{quote(identifier, safe='')}"


def _name(noun: str) -> FieldDescriptor:
    return FieldDescriptor(
        "name", "name", FieldType.STRING, FieldRole.REQUIRED, description=f"Name of the {noun}"
    )


def _team_id(noun: str) -> FieldDescriptor:
    return FieldDescriptor(
        "team_id",
        "team_id",
        FieldType.STRING,
        FieldRole.OPTIONAL,
        Presence.NULL_IF_ZERO,
        description=f"Team ID where the {noun} belongs",
    )


def _description(noun: str) -> FieldDescriptor:
    return FieldDescriptor(
        "description",
        "description",
        FieldType.STRING,
        FieldRole.OPTIONAL,
        Presence.NULL_IF_ZERO,
        description=f"Description of the {noun}",
    )


def _settings(noun: str) -> FieldDescriptor:
    return FieldDescriptor(
        "settings",
        "settings",
        FieldType.SETTINGS,
        FieldRole.OPTIONAL,
        Presence.NULL_IF_ZERO,
        description=f"Advanced settings for the {noun}",
    )


SCHEMAS: dict[ResourceKind, ResourceSchema] = {
    ResourceKind.SCENARIO: ResourceSchema(
        ResourceKind.SCENARIO,
        "/v2/scenarios",
        (
            _name("scenario"),
            _description("scenario"),
            FieldDescriptor(
                "active",
                "is_active",
                FieldType.BOOLEAN,
                FieldRole.OPTIONAL,
                description="Whether the scenario is active",
            ),
            _team_id("scenario"),
        ),
    ),
    ResourceKind.CONNECTION: ResourceSchema(
        ResourceKind.CONNECTION,
        "/v2/connections",
        (
            _name("connection"),
            FieldDescriptor(
                "app_name",
                "app_name",
                FieldType.STRING,
                FieldRole.REQUIRED,
                description="Name of the app for this connection (e.g. 'gmail', 'slack')",
            ),
            _team_id("connection"),
            _settings("connection"),
            FieldDescriptor(
                "verified",
                "verified",
                FieldType.BOOLEAN,
                FieldRole.COMPUTED,
                description="Whether the connection is verified",
            ),
        ),
    ),
    ResourceKind.WEBHOOK: ResourceSchema(
        ResourceKind.WEBHOOK,
        "/v2/webhooks",
        (
            _name("webhook"),
            FieldDescriptor(
                "url",
                "url",
                FieldType.STRING,
                FieldRole.COMPUTED,
                description="URL endpoint for the webhook",
            ),
            _team_id("webhook"),
            FieldDescriptor(
                "active",
                "active",
                FieldType.BOOLEAN,
                FieldRole.OPTIONAL,
                description="Whether the webhook is active",
            ),
            _settings("webhook"),
        ),
    ),
    ResourceKind.TEAM: ResourceSchema(
        ResourceKind.TEAM,
        "/v2/teams",
        (
            _name("team"),
            FieldDescriptor(
                "organization_id",
                "organization_id",
                FieldType.STRING,
                FieldRole.OPTIONAL,
                Presence.NULL_IF_ZERO,
                description="Organization ID the team belongs to",
            ),
        ),
    ),
    ResourceKind.ORGANIZATION: ResourceSchema(
        ResourceKind.ORGANIZATION,
        "/v2/organizations",
        (_name("organization"),),
    ),
    ResourceKind.DATA_STORE: ResourceSchema(
        ResourceKind.DATA_STORE,
        "/v2/data-stores",
        (
            _name("data store"),
            _description("data store"),
            _team_id("data store"),
        ),
    ),
}


def get_schema(kind: ResourceKind) -> ResourceSchema:
    return SCHEMAS[kind]
