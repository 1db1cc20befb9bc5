"""List permissions use case."""

from permset.application.dto.pagination import ListQuery, Page
from permset.application.dto.permission_dto import PermissionDetails
from permset.application.ports.repositories import PermissionRepository
from permset.application.use_cases.permission.get_permission import load_permission_details


class ListPermissionsUseCase:
    """Paginated permission listing with optional relation includes."""

    def __init__(self, permissions: PermissionRepository) -> None:
        self._permissions = permissions

    async def execute(
        self,
        query: ListQuery,
        *,
        include_permission_sets: bool = False,
        include_users: bool = False,
        include_members: bool = False,
    ) -> Page[PermissionDetails]:
        permissions, total = await self._permissions.list_page(query)
        details = await load_permission_details(
            self._permissions,
            permissions,
            include_permission_sets=include_permission_sets,
            include_users=include_users,
            include_members=include_members,
        )
        return Page.build(details, total, query)
