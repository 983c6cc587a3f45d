"""Domain models (Pydantic v2).

- `RemoteRecord`: what the API holds, using the service's zero-value
  conventions (empty string instead of null).
- `LocalRecord`: what the orchestrator persists between runs. Each value is
  null (`None`), unknown (`UNKNOWN`) or known (anything else).

These models describe *what* a resource is, not *how* it is fetched.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from core.domain.kinds import ResourceKind


class _Unknown:
    """Marker for a value that will only be known after apply."""

    _instance: "_Unknown | None" = None

    def __new__(cls) -> "_Unknown":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNKNOWN"

    def __copy__(self) -> "_Unknown":
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> "_Unknown":
        return self


UNKNOWN = _Unknown()


def is_unknown(value: object) -> bool:
    return value is UNKNOWN


class RecordState(str, Enum):
    UNMANAGED = "unmanaged"
    PENDING_CREATE = "pending_create"
    SYNCED = "synced"
    PENDING_UPDATE = "pending_update"
    PENDING_DELETE = "pending_delete"
    GONE = "gone"


class RemoteRecord(BaseModel):
    """Wire record decoded from an API response."""

    model_config = ConfigDict(frozen=True)

    kind: ResourceKind = Field(..., description="Kind the record belongs to.")
    id: str = Field(..., min_length=1, description="Server-assigned identifier.")
    values: dict[str, Any] = Field(
        default_factory=dict,
        description="Field name -> wire value, zero values for absent keys.",
    )


class LocalRecord(BaseModel):
    """One resource instance as known to the orchestrator.

    `id` stays `None` until the first successful create or import and never
    changes afterwards.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: ResourceKind = Field(..., description="Kind of the resource.")
    id: str | None = Field(
        default=None,
        description="Server-assigned identifier (None before create/import).",
    )
    values: dict[str, Any] = Field(
        default_factory=dict,
        description="Field name -> None (null), UNKNOWN or a known value.",
    )
    state: RecordState = Field(
        default=RecordState.UNMANAGED,
        description="Lifecycle state of the record.",
    )

    def get(self, name: str) -> Any:
        return self.values.get(name)

    def with_state(self, state: RecordState) -> "LocalRecord":
        return self.model_copy(update={"state": state}, deep=True)

    def known_values(self) -> dict[str, Any]:
        """Values that are neither null nor unknown."""

        return {k: v for k, v in self.values.items() if v is not None and not is_unknown(v)}
