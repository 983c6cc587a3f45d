"""Reconciliation engine.

One `Reconciler` per resource kind drives create/read/update/delete/import
against a gateway and folds the remote answer back into a `LocalRecord`.
The engine holds no state between calls: everything comes either from the
record handed in or from a fresh gateway call.

State machine:

    create  : Unmanaged -> Synced
    read    : Synced    -> Synced | Gone
    update  : Synced    -> Synced
    delete  : Synced    -> Gone      (Gone -> Gone is a tolerated no-op)
    import  : Unmanaged -> Synced
    lookup  : Unmanaged -> Unmanaged (read-only snapshot)

`NotFoundError` is turned into a transition only for `read` and `delete`;
every other error propagates, annotated with operation and kind.
"""

from __future__ import annotations

from collections.abc import Awaitable, Mapping
from typing import Any, TypeVar

from core.domain.models import LocalRecord, RecordState, RemoteRecord, is_unknown
from core.domain.normalize import local_values
from core.domain.schema import FieldDescriptor, FieldRole, FieldType, ResourceSchema
from core.errors import (
    ConfigurationError,
    InvalidTransitionError,
    NotFoundError,
    ReconcileError,
)
from core.interfaces.gateway import ResourceGateway
from core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_PYTHON_TYPES: dict[FieldType, tuple[type, ...]] = {
    FieldType.STRING: (str,),
    FieldType.BOOLEAN: (bool,),
    FieldType.SETTINGS: (Mapping,),
}


class Reconciler:
    """Generic lifecycle driver, parameterized by the gateway's schema."""

    def __init__(self, gateway: ResourceGateway) -> None:
        self._gateway = gateway
        self._log = logger.bind(kind=self.kind)

    @property
    def schema(self) -> ResourceSchema:
        return self._gateway.schema

    @property
    def kind(self) -> str:
        return self._gateway.schema.kind.value

    # -- helpers -------------------------------------------------------------

    def _require_state(self, operation: str, record: LocalRecord, *allowed: RecordState) -> None:
        if record.kind is not self.schema.kind:
            raise InvalidTransitionError(
                f"cannot {operation} a {record.kind.label()} record with the {self.kind} reconciler"
            ).annotate(operation=operation, kind=self.kind)
        if record.state not in allowed:
            raise InvalidTransitionError(
                f"cannot {operation} from state {record.state.value}"
            ).annotate(operation=operation, kind=self.kind)

    def _require_id(self, operation: str, record: LocalRecord) -> str:
        if not record.id:
            raise InvalidTransitionError(
                f"cannot {operation} a record without identifier"
            ).annotate(operation=operation, kind=self.kind)
        return record.id

    def _check_value(self, descriptor: FieldDescriptor, value: Any) -> None:
        if is_unknown(value):
            raise ConfigurationError(f"value of {descriptor.name!r} is not known yet")
        if not isinstance(value, _PYTHON_TYPES[descriptor.type]):
            raise ConfigurationError(
                f"{descriptor.name!r} must be a {descriptor.type.value}, got {type(value).__name__}"
            )

    def build_request(self, desired: Mapping[str, Any]) -> dict[str, Any]:
        """Validate desired values and keep the client-supplied ones.

        Raises `ConfigurationError` for unknown names, missing required
        values, unknown values and wrong types. Null optional values are
        dropped (they are omitted from the request body).
        """

        names = set(self.schema.field_names)
        unexpected = sorted(set(desired) - names)
        if unexpected:
            raise ConfigurationError(f"unknown fields for {self.kind}: {', '.join(unexpected)}")

        request: dict[str, Any] = {}
        for descriptor in self.schema.client_fields:
            value = desired.get(descriptor.name)
            if value is None:
                if descriptor.role is FieldRole.REQUIRED:
                    raise ConfigurationError(f"missing required field {descriptor.name!r}")
                continue
            self._check_value(descriptor, value)
            request[descriptor.name] = value
        return request

    def _absorb(
        self, remote: RemoteRecord, state: RecordState, identifier: str | None = None
    ) -> LocalRecord:
        # Once known, the identifier never changes.
        return LocalRecord(
            kind=self.schema.kind,
            id=identifier or remote.id,
            values=local_values(self.schema, remote),
            state=state,
        )

    async def _call(self, operation: str, awaitable: Awaitable[T]) -> T:
        try:
            return await awaitable
        except ReconcileError as exc:
            exc.annotate(operation=operation, kind=self.kind)
            self._log.warning("reconcile_failed", operation=operation, error=str(exc))
            raise

    # -- operations ----------------------------------------------------------

    async def create(self, desired: Mapping[str, Any]) -> LocalRecord:
        try:
            request = self.build_request(desired)
        except ConfigurationError as exc:
            exc.annotate(operation="create", kind=self.kind)
            raise

        self._log.debug("state_transition", state=RecordState.PENDING_CREATE.value)
        remote = await self._call("create", self._gateway.create(request))
        record = self._absorb(remote, RecordState.SYNCED)
        self._log.info("resource_created", resource_id=record.id)
        return record

    async def read(self, record: LocalRecord) -> LocalRecord:
        """Refresh every field from the remote service.

        Returns the record with state `GONE` when the object no longer exists.
        """

        self._require_state("read", record, RecordState.SYNCED)
        identifier = self._require_id("read", record)
        try:
            remote = await self._gateway.get(identifier)
        except NotFoundError:
            self._log.info("resource_gone", resource_id=identifier)
            return record.with_state(RecordState.GONE)
        except ReconcileError as exc:
            exc.annotate(operation="read", kind=self.kind)
            self._log.warning("reconcile_failed", operation="read", error=str(exc))
            raise
        self._log.debug("resource_read", resource_id=identifier)
        return self._absorb(remote, RecordState.SYNCED, identifier)

    async def update(self, record: LocalRecord, desired: Mapping[str, Any]) -> LocalRecord:
        self._require_state("update", record, RecordState.SYNCED)
        identifier = self._require_id("update", record)
        try:
            request = self.build_request(desired)
        except ConfigurationError as exc:
            exc.annotate(operation="update", kind=self.kind)
            raise

        self._log.debug("state_transition", resource_id=identifier, state=RecordState.PENDING_UPDATE.value)
        remote = await self._call("update", self._gateway.update(identifier, request))
        self._log.info("resource_updated", resource_id=identifier)
        return self._absorb(remote, RecordState.SYNCED, identifier)

    async def delete(self, record: LocalRecord) -> LocalRecord:
        """Delete the remote object; an already absent object counts as deleted."""

        self._require_state("delete", record, RecordState.SYNCED, RecordState.GONE)
        if record.state is RecordState.GONE:
            return record
        identifier = self._require_id("delete", record)

        self._log.debug("state_transition", resource_id=identifier, state=RecordState.PENDING_DELETE.value)
        existed = await self._call("delete", self._gateway.delete(identifier))
        if existed:
            self._log.info("resource_deleted", resource_id=identifier)
        else:
            self._log.info("resource_already_absent", resource_id=identifier)
        return record.with_state(RecordState.GONE)

    async def import_resource(self, identifier: str) -> LocalRecord:
        """Adopt an existing remote object given only its identifier."""

        if not identifier:
            raise ConfigurationError("import requires a non-empty identifier").annotate(
                operation="import", kind=self.kind
            )
        remote = await self._call("import", self._gateway.get(identifier))
        self._log.info("resource_imported", resource_id=identifier)
        return self._absorb(remote, RecordState.SYNCED, identifier)

    async def lookup(self, identifier: str) -> LocalRecord:
        """Read-only snapshot of a remote object; never adopted."""

        if not identifier:
            raise ConfigurationError("lookup requires a non-empty identifier").annotate(
                operation="lookup", kind=self.kind
            )
        remote = await self._call("lookup", self._gateway.get(identifier))
        self._log.debug("resource_looked_up", resource_id=identifier)
        return self._absorb(remote, RecordState.UNMANAGED, identifier)
