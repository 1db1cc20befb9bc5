"""Get permission use case."""

import asyncio
from collections.abc import Sequence

from permset.application.dto.permission_dto import PermissionDetails
from permset.application.ports.repositories import PermissionRepository
from permset.domain.entities import Permission
from permset.domain.exceptions import NotFound
from permset.domain.value_objects import Principal


async def load_permission_details(
    repository: PermissionRepository,
    permissions: Sequence[Permission],
    *,
    include_permission_sets: bool = False,
    include_users: bool = False,
    include_members: bool = False,
) -> list[PermissionDetails]:
    """Attach requested relations, loading each relation once for all permissions."""

    async def _nothing() -> dict:
        return {}

    ids = [p.id for p in permissions]
    sets, users, members = await asyncio.gather(
        repository.permission_sets_for(ids) if include_permission_sets and ids else _nothing(),
        repository.principals_for(ids, Principal.USER) if include_users and ids else _nothing(),
        repository.principals_for(ids, Principal.MEMBER) if include_members and ids else _nothing(),
    )
    return [
        PermissionDetails(
            permission=p,
            permission_sets=sets.get(p.id, []) if include_permission_sets else None,
            users=users.get(p.id, []) if include_users else None,
            members=members.get(p.id, []) if include_members else None,
        )
        for p in permissions
    ]


class GetPermissionUseCase:
    """Get permission by id or name, optionally with its relations."""

    def __init__(self, permissions: PermissionRepository) -> None:
        self._permissions = permissions

    async def execute(
        self,
        permission_id: str,
        *,
        include_permission_sets: bool = False,
        include_users: bool = False,
        include_members: bool = False,
    ) -> PermissionDetails:
        permission = await self._permissions.get_by_id(permission_id)
        if permission is None:
            raise NotFound()
        [details] = await load_permission_details(
            self._permissions,
            [permission],
            include_permission_sets=include_permission_sets,
            include_users=include_users,
            include_members=include_members,
        )
        return details

    async def by_name(self, name: str, organization_id: str | None = None) -> Permission:
        permission = await self._permissions.find_by_name(name, organization_id)
        if permission is None:
            raise NotFound()
        return permission
