"""Remote resource gateway contract."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from core.domain.models import RemoteRecord
from core.domain.schema import ResourceSchema


@runtime_checkable
class ResourceGateway(Protocol):
    """CRUD operations for one resource kind.

    Rules:
    - `get`/`update` raise `NotFoundError` on 404.
    - `delete` treats 404 as success.
    - Any other status >= 400 raises `ApiError`.
    """

    schema: ResourceSchema

    async def create(self, request: dict[str, Any]) -> RemoteRecord:
        ...

    async def get(self, identifier: str) -> RemoteRecord:
        ...

    async def update(self, identifier: str, request: dict[str, Any]) -> RemoteRecord:
        ...

    async def delete(self, identifier: str) -> bool:
        """Return False when the object was already absent."""

        ...
