"""Resource kinds managed by the reconciler.

The closed set of remote object types lives in the domain layer so that
the CLI, the gateways and the engine share a single source of truth.
"""

from __future__ import annotations

from enum import Enum


class ResourceKind(str, Enum):
    """Remote object types hosted by the automation platform."""

    SCENARIO = "scenario"
    CONNECTION = "connection"
    WEBHOOK = "webhook"
    TEAM = "team"
    ORGANIZATION = "organization"
    DATA_STORE = "data_store"

    @classmethod
    def from_name(cls, name: str) -> "ResourceKind":
        """Parse a user supplied kind name (`data-store`, `Data_Store`, ...)."""

        normalized = name.strip().lower().replace("-", "_")
        for kind in cls:
            if kind.value == normalized:
                return kind
        raise ValueError(f"unknown resource kind: {name!r}")

    def label(self) -> str:
        """Human readable noun for messages and logging."""

        return self.value.replace("_", " ")
