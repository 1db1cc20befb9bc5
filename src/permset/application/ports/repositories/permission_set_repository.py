"""Permission set repository port."""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from permset.application.dto.pagination import ListQuery
from permset.domain.entities import Permission, PermissionSet
from permset.domain.value_objects import Principal


class PermissionSetRepository(Protocol):
    """Port for permission set persistence and its permission/user/member links."""

    async def create_many(
        self, values: Sequence[Mapping[str, Any]]
    ) -> list[PermissionSet]: ...

    async def get_by_id(self, permission_set_id: str) -> PermissionSet | None: ...

    async def find_by_name(
        self, name: str, organization_id: str | None = None
    ) -> PermissionSet | None: ...

    async def list_page(self, query: ListQuery) -> tuple[list[PermissionSet], int]: ...

    async def update(
        self, permission_set_id: str, values: Mapping[str, Any]
    ) -> PermissionSet | None: ...

    async def delete_many(self, permission_set_ids: Sequence[str]) -> int: ...

    async def permissions_for(
        self, permission_set_ids: Sequence[str]
    ) -> dict[str, list[Permission]]: ...

    async def principals_for(
        self, permission_set_ids: Sequence[str], principal: Principal
    ) -> dict[str, list[dict[str, Any]]]: ...

    async def assign_permissions(
        self, permission_set_id: str, permission_ids: Sequence[str]
    ) -> None: ...

    async def remove_permissions(
        self, permission_set_id: str, permission_ids: Sequence[str]
    ) -> None: ...

    async def assign(
        self, permission_set_id: str, principal: Principal, principal_ids: Sequence[str]
    ) -> None: ...

    async def remove(
        self, permission_set_id: str, principal: Principal, principal_ids: Sequence[str]
    ) -> None: ...
