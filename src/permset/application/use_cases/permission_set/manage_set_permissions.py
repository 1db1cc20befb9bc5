"""Add or remove permissions of a permission set."""

from collections.abc import Sequence

from permset.application.ports.repositories import PermissionSetRepository
from permset.application.use_cases.permission_set.get_permission_set import SET_NOT_FOUND
from permset.domain.exceptions import NotFound


class ManageSetPermissionsUseCase:
    """Link permissions into a set, or unlink them."""

    def __init__(self, permission_sets: PermissionSetRepository) -> None:
        self._permission_sets = permission_sets

    async def add(self, permission_set_id: str, permission_ids: Sequence[str]) -> int:
        """Returns the number of distinct permissions requested."""
        if await self._permission_sets.get_by_id(permission_set_id) is None:
            raise NotFound(code=SET_NOT_FOUND)
        await self._permission_sets.assign_permissions(permission_set_id, permission_ids)
        return len(set(permission_ids))

    async def remove(self, permission_set_id: str, permission_ids: Sequence[str]) -> None:
        await self._permission_sets.remove_permissions(permission_set_id, permission_ids)
