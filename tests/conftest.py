"""pytest configuration: `src/` on sys.path, shared fixtures and fakes."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

# Allows `pytest` without an editable install.
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

import pytest  # noqa: E402
import respx  # noqa: E402
import structlog  # noqa: E402

from core.config import ClientConfig  # noqa: E402
from core.domain.kinds import ResourceKind  # noqa: E402
from core.domain.models import RemoteRecord  # noqa: E402
from core.domain.schema import FieldRole, ResourceSchema, get_schema  # noqa: E402
from core.errors import NotFoundError  # noqa: E402
from core.logging import configure_library_default  # noqa: E402

BASE_URL = "https://api.make.com/"


class InMemoryGateway:
    """Idempotent fake backend holding wire-form values (zero conventions)."""

    def __init__(self, schema: ResourceSchema) -> None:
        self.schema = schema
        self.objects: dict[str, dict[str, Any]] = {}
        self.requests: list[tuple[str, dict[str, Any]]] = []
        self.calls = 0
        self._next_id = 100

    def _materialize(self, identifier: str, request: dict[str, Any]) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for descriptor in self.schema.fields:
            if descriptor.role is FieldRole.COMPUTED:
                if descriptor.name == "url":
                    values["url"] = f"https://hook.make.com/{identifier}"
                else:
                    values[descriptor.name] = descriptor.zero_value
                continue
            value = request.get(descriptor.name)
            values[descriptor.name] = descriptor.zero_value if value is None else value
        return values

    def _record(self, identifier: str) -> RemoteRecord:
        return RemoteRecord(kind=self.schema.kind, id=identifier, values=dict(self.objects[identifier]))

    async def create(self, request: dict[str, Any]) -> RemoteRecord:
        self.calls += 1
        self.requests.append(("create", request))
        identifier = str(self._next_id)
        self._next_id += 1
        self.objects[identifier] = self._materialize(identifier, request)
        return self._record(identifier)

    async def get(self, identifier: str) -> RemoteRecord:
        self.calls += 1
        if identifier not in self.objects:
            raise NotFoundError(self.schema.kind.label(), identifier)
        return self._record(identifier)

    async def update(self, identifier: str, request: dict[str, Any]) -> RemoteRecord:
        self.calls += 1
        self.requests.append(("update", request))
        if identifier not in self.objects:
            raise NotFoundError(self.schema.kind.label(), identifier)
        self.objects[identifier] = self._materialize(identifier, request)
        return self._record(identifier)

    async def delete(self, identifier: str) -> bool:
        self.calls += 1
        return self.objects.pop(identifier, None) is not None


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    structlog.reset_defaults()
    configure_library_default()


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(base_url=BASE_URL, api_token="test-token")


@pytest.fixture
def make_api():
    with respx.mock(base_url="https://api.make.com", assert_all_called=False) as mock:
        yield mock


@pytest.fixture
def gateway_factory():
    def build(kind: ResourceKind) -> InMemoryGateway:
        return InMemoryGateway(get_schema(kind))

    return build
