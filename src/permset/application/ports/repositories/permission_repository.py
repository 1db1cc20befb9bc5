"""Permission repository port."""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from permset.application.dto.pagination import ListQuery
from permset.domain.entities import Permission, PermissionSet
from permset.domain.value_objects import Principal


class PermissionRepository(Protocol):
    """Port for permission persistence and its user/member/set links."""

    async def create_many(self, values: Sequence[Mapping[str, Any]]) -> list[Permission]: ...

    async def get_by_id(self, permission_id: str) -> Permission | None: ...

    async def find_by_name(
        self, name: str, organization_id: str | None = None
    ) -> Permission | None: ...

    async def list_page(self, query: ListQuery) -> tuple[list[Permission], int]: ...

    async def update(
        self, permission_id: str, values: Mapping[str, Any]
    ) -> Permission | None: ...

    async def delete_many(self, permission_ids: Sequence[str]) -> int: ...

    async def permission_sets_for(
        self, permission_ids: Sequence[str]
    ) -> dict[str, list[PermissionSet]]: ...

    async def principals_for(
        self, permission_ids: Sequence[str], principal: Principal
    ) -> dict[str, list[dict[str, Any]]]: ...

    async def assign(
        self, permission_id: str, principal: Principal, principal_ids: Sequence[str]
    ) -> None: ...

    async def remove(
        self, permission_id: str, principal: Principal, principal_ids: Sequence[str]
    ) -> None: ...
