"""Get permission set use case."""

import asyncio
from collections.abc import Sequence

from permset.application.dto.permission_set_dto import PermissionSetDetails
from permset.application.ports.repositories import PermissionSetRepository
from permset.domain.entities import PermissionSet
from permset.domain.exceptions import NotFound
from permset.domain.value_objects import Principal

SET_NOT_FOUND = "PERMISSION_SET_NOT_FOUND"


async def load_permission_set_details(
    repository: PermissionSetRepository,
    permission_sets: Sequence[PermissionSet],
    *,
    include_permissions: bool = False,
    include_users: bool = False,
    include_members: bool = False,
) -> list[PermissionSetDetails]:
    async def _nothing() -> dict:
        return {}

    ids = [s.id for s in permission_sets]
    permissions, users, members = await asyncio.gather(
        repository.permissions_for(ids) if include_permissions and ids else _nothing(),
        repository.principals_for(ids, Principal.USER) if include_users and ids else _nothing(),
        repository.principals_for(ids, Principal.MEMBER) if include_members and ids else _nothing(),
    )
    return [
        PermissionSetDetails(
            permission_set=s,
            permissions=permissions.get(s.id, []) if include_permissions else None,
            users=users.get(s.id, []) if include_users else None,
            members=members.get(s.id, []) if include_members else None,
        )
        for s in permission_sets
    ]


class GetPermissionSetUseCase:
    """Get permission set by id or name, optionally with its relations."""

    def __init__(self, permission_sets: PermissionSetRepository) -> None:
        self._permission_sets = permission_sets

    async def execute(
        self,
        permission_set_id: str,
        *,
        include_permissions: bool = False,
        include_users: bool = False,
        include_members: bool = False,
    ) -> PermissionSetDetails:
        permission_set = await self._permission_sets.get_by_id(permission_set_id)
        if permission_set is None:
            raise NotFound(code=SET_NOT_FOUND)
        [details] = await load_permission_set_details(
            self._permission_sets,
            [permission_set],
            include_permissions=include_permissions,
            include_users=include_users,
            include_members=include_members,
        )
        return details

    async def by_name(self, name: str, organization_id: str | None = None) -> PermissionSet:
        permission_set = await self._permission_sets.find_by_name(name, organization_id)
        if permission_set is None:
            raise NotFound(code=SET_NOT_FOUND)
        return permission_set
