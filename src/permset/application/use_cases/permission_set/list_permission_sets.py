"""List permission sets use case."""

from permset.application.dto.pagination import ListQuery, Page
from permset.application.dto.permission_set_dto import PermissionSetDetails
from permset.application.ports.repositories import PermissionSetRepository
from permset.application.use_cases.permission_set.get_permission_set import (
    load_permission_set_details,
)


class ListPermissionSetsUseCase:
    def __init__(self, permission_sets: PermissionSetRepository) -> None:
        self._permission_sets = permission_sets

    async def execute(
        self,
        query: ListQuery,
        *,
        include_permissions: bool = False,
        include_users: bool = False,
        include_members: bool = False,
    ) -> Page[PermissionSetDetails]:
        permission_sets, total = await self._permission_sets.list_page(query)
        details = await load_permission_set_details(
            self._permission_sets,
            permission_sets,
            include_permissions=include_permissions,
            include_users=include_users,
            include_members=include_members,
        )
        return Page.build(details, total, query)
