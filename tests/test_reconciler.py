import asyncio

import pytest

from core.domain.kinds import ResourceKind
from core.domain.models import UNKNOWN, LocalRecord, RecordState
from core.domain.schema import get_schema
from core.errors import (
    ApiError,
    ConfigurationError,
    InvalidTransitionError,
    NotFoundError,
    TransportError,
)
from core.services.reconciler import Reconciler

MINIMAL = {
    ResourceKind.SCENARIO: {"name": "Sync"},
    ResourceKind.CONNECTION: {"name": "Mail", "app_name": "gmail"},
    ResourceKind.WEBHOOK: {"name": "Inbound"},
    ResourceKind.TEAM: {"name": "Ops"},
    ResourceKind.ORGANIZATION: {"name": "Acme"},
    ResourceKind.DATA_STORE: {"name": "cache"},
}


@pytest.fixture
def scenario(gateway_factory):
    gateway = gateway_factory(ResourceKind.SCENARIO)
    return gateway, Reconciler(gateway)


class FailingGateway:
    """Gateway whose every call raises the same prepared error."""

    def __init__(self, kind: ResourceKind, error: Exception) -> None:
        self.schema = get_schema(kind)
        self.error = error

    async def create(self, request):
        raise self.error

    async def get(self, identifier):
        raise self.error

    async def update(self, identifier, request):
        raise self.error

    async def delete(self, identifier):
        raise self.error


class HangingGateway(FailingGateway):
    def __init__(self, kind: ResourceKind) -> None:
        super().__init__(kind, RuntimeError("unreachable"))
        self.started = asyncio.Event()

    async def get(self, identifier):
        self.started.set()
        await asyncio.sleep(3600)


class TestLifecycle:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", list(ResourceKind))
    async def test_create_then_read_is_stable(self, kind, gateway_factory):
        reconciler = Reconciler(gateway_factory(kind))

        created = await reconciler.create(MINIMAL[kind])
        refreshed = await reconciler.read(created)

        assert created.state is RecordState.SYNCED
        assert created.id
        assert refreshed == created

    @pytest.mark.asyncio
    async def test_create_fills_every_field(self, scenario):
        _, reconciler = scenario

        record = await reconciler.create({"name": "Sync"})

        assert record.values == {"name": "Sync", "description": None, "active": False, "team_id": None}

    @pytest.mark.asyncio
    async def test_computed_fields_are_populated_and_never_sent(self, gateway_factory):
        gateway = gateway_factory(ResourceKind.WEBHOOK)
        reconciler = Reconciler(gateway)

        record = await reconciler.create({"name": "Inbound", "url": "https://ignored.example.com"})

        assert gateway.requests == [("create", {"name": "Inbound"})]
        assert record.get("url") == f"https://hook.make.com/{record.id}"

    @pytest.mark.asyncio
    async def test_settings_are_normalized(self, gateway_factory):
        reconciler = Reconciler(gateway_factory(ResourceKind.CONNECTION))

        record = await reconciler.create(
            {"name": "Mail", "app_name": "gmail", "settings": {"retries": 3, "verbose": True, "ratio": 0.25}}
        )

        assert record.get("settings") == {"retries": "3", "verbose": "true", "ratio": "0.250000"}
        assert record.get("verified") is False

    @pytest.mark.asyncio
    async def test_empty_string_is_sent_and_comes_back_null(self, scenario):
        gateway, reconciler = scenario

        record = await reconciler.create({"name": "Sync", "description": ""})

        assert gateway.requests[-1] == ("create", {"name": "Sync", "description": ""})
        assert record.get("description") is None

    @pytest.mark.asyncio
    async def test_update_keeps_identifier(self, scenario):
        gateway, reconciler = scenario
        created = await reconciler.create({"name": "Sync"})

        updated = await reconciler.update(created, {"name": "Sync v2", "active": True, "team_id": "9"})

        assert updated.id == created.id
        assert updated.state is RecordState.SYNCED
        assert updated.values == {"name": "Sync v2", "description": None, "active": True, "team_id": "9"}
        assert gateway.requests[-1] == ("update", {"name": "Sync v2", "active": True, "team_id": "9"})

    @pytest.mark.asyncio
    async def test_read_of_removed_object_is_gone(self, scenario):
        gateway, reconciler = scenario
        created = await reconciler.create({"name": "Sync"})
        gateway.objects.clear()

        refreshed = await reconciler.read(created)

        assert refreshed.state is RecordState.GONE
        assert refreshed.id == created.id
        assert refreshed.values == created.values

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, scenario):
        gateway, reconciler = scenario
        created = await reconciler.create({"name": "Sync"})

        gone = await reconciler.delete(created)
        calls = gateway.calls
        again = await reconciler.delete(gone)

        assert gone.state is RecordState.GONE
        assert again == gone
        assert gateway.calls == calls
        assert created.id not in gateway.objects

    @pytest.mark.asyncio
    async def test_delete_of_already_absent_object(self, scenario):
        gateway, reconciler = scenario
        created = await reconciler.create({"name": "Sync"})
        gateway.objects.clear()

        gone = await reconciler.delete(created)

        assert gone.state is RecordState.GONE

    @pytest.mark.asyncio
    async def test_update_of_removed_object_fails(self, scenario):
        gateway, reconciler = scenario
        created = await reconciler.create({"name": "Sync"})
        gateway.objects.clear()

        with pytest.raises(NotFoundError) as excinfo:
            await reconciler.update(created, {"name": "Sync v2"})

        assert excinfo.value.operation == "update"
        assert excinfo.value.kind == "scenario"
        assert str(excinfo.value) == f"[scenario update] scenario with ID {created.id} not found"


class TestImport:
    @pytest.mark.asyncio
    async def test_import_matches_direct_read(self, scenario):
        _, reconciler = scenario
        created = await reconciler.create({"name": "Sync", "active": True})

        imported = await reconciler.import_resource(created.id)

        assert imported == created

    @pytest.mark.asyncio
    async def test_lookup_is_not_adopted(self, scenario):
        _, reconciler = scenario
        created = await reconciler.create({"name": "Sync"})

        snapshot = await reconciler.lookup(created.id)

        assert snapshot.state is RecordState.UNMANAGED
        assert snapshot.values == created.values

    @pytest.mark.asyncio
    async def test_import_of_missing_object(self, scenario):
        _, reconciler = scenario

        with pytest.raises(NotFoundError) as excinfo:
            await reconciler.import_resource("404")

        assert excinfo.value.operation == "import"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation", ["import_resource", "lookup"])
    async def test_empty_identifier(self, scenario, operation):
        gateway, reconciler = scenario

        with pytest.raises(ConfigurationError):
            await getattr(reconciler, operation)("")

        assert gateway.calls == 0


class TestValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "desired",
        [
            {},
            {"name": None},
            {"name": "Sync", "owner": "me"},
            {"name": UNKNOWN},
            {"name": "Sync", "team_id": UNKNOWN},
            {"name": 12},
            {"name": "Sync", "active": "yes"},
        ],
    )
    async def test_rejected_before_any_request(self, scenario, desired):
        gateway, reconciler = scenario

        with pytest.raises(ConfigurationError) as excinfo:
            await reconciler.create(desired)

        assert excinfo.value.operation == "create"
        assert gateway.calls == 0

    @pytest.mark.asyncio
    async def test_connection_requires_app_name(self, gateway_factory):
        gateway = gateway_factory(ResourceKind.CONNECTION)

        with pytest.raises(ConfigurationError, match="app_name"):
            await Reconciler(gateway).create({"name": "Mail"})

        assert gateway.calls == 0

    @pytest.mark.asyncio
    async def test_settings_must_be_a_mapping(self, gateway_factory):
        gateway = gateway_factory(ResourceKind.WEBHOOK)

        with pytest.raises(ConfigurationError, match="settings"):
            await Reconciler(gateway).create({"name": "Inbound", "settings": ["a"]})

    @pytest.mark.asyncio
    async def test_invalid_update_keeps_remote_untouched(self, scenario):
        gateway, reconciler = scenario
        created = await reconciler.create({"name": "Sync"})
        calls = gateway.calls

        with pytest.raises(ConfigurationError):
            await reconciler.update(created, {"name": None})

        assert gateway.calls == calls


class TestTransitions:
    @pytest.mark.asyncio
    async def test_read_requires_synced(self, scenario):
        gateway, reconciler = scenario
        record = LocalRecord(kind=ResourceKind.SCENARIO)

        with pytest.raises(InvalidTransitionError):
            await reconciler.read(record)

        assert gateway.calls == 0

    @pytest.mark.asyncio
    async def test_update_of_gone_record(self, scenario):
        _, reconciler = scenario
        record = LocalRecord(kind=ResourceKind.SCENARIO, id="1", state=RecordState.GONE)

        with pytest.raises(InvalidTransitionError, match="from state gone"):
            await reconciler.update(record, {"name": "Sync"})

    @pytest.mark.asyncio
    async def test_delete_of_unmanaged_record(self, scenario):
        _, reconciler = scenario

        with pytest.raises(InvalidTransitionError):
            await reconciler.delete(LocalRecord(kind=ResourceKind.SCENARIO))

    @pytest.mark.asyncio
    async def test_kind_mismatch(self, scenario):
        _, reconciler = scenario
        record = LocalRecord(kind=ResourceKind.TEAM, id="1", state=RecordState.SYNCED)

        with pytest.raises(InvalidTransitionError, match="team record"):
            await reconciler.read(record)

    @pytest.mark.asyncio
    async def test_synced_record_without_identifier(self, scenario):
        _, reconciler = scenario
        record = LocalRecord(kind=ResourceKind.SCENARIO, state=RecordState.SYNCED)

        with pytest.raises(InvalidTransitionError, match="without identifier"):
            await reconciler.read(record)


class TestErrors:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [ApiError(500, "bad"), TransportError("failed to perform request")])
    async def test_errors_are_annotated_in_place(self, error):
        reconciler = Reconciler(FailingGateway(ResourceKind.TEAM, error))

        with pytest.raises(type(error)) as excinfo:
            await reconciler.create({"name": "Ops"})

        assert excinfo.value is error
        assert error.operation == "create"
        assert error.kind == "team"
        assert str(error).startswith("[team create] ")

    @pytest.mark.asyncio
    async def test_read_propagates_non_not_found_errors(self):
        error = ApiError(503, "maintenance")
        reconciler = Reconciler(FailingGateway(ResourceKind.TEAM, error))
        record = LocalRecord(kind=ResourceKind.TEAM, id="1", state=RecordState.SYNCED)

        with pytest.raises(ApiError) as excinfo:
            await reconciler.read(record)

        assert str(excinfo.value) == "[team read] API request failed with status 503: maintenance"

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        gateway = HangingGateway(ResourceKind.ORGANIZATION)
        task = asyncio.create_task(Reconciler(gateway).lookup("o1"))
        await gateway.started.wait()

        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
