"""Delete permission sets use case."""

from collections.abc import Sequence

from permset.application.ports.repositories import PermissionSetRepository
from permset.application.use_cases.permission_set.get_permission_set import SET_NOT_FOUND
from permset.domain.exceptions import NotFound


class DeletePermissionSetsUseCase:
    """Delete permission sets and their permission, user and member links.

    The permissions themselves are kept.
    """

    def __init__(self, permission_sets: PermissionSetRepository) -> None:
        self._permission_sets = permission_sets

    async def execute(self, permission_set_ids: Sequence[str]) -> int:
        return await self._permission_sets.delete_many(permission_set_ids)

    async def execute_one(self, permission_set_id: str) -> None:
        if await self._permission_sets.get_by_id(permission_set_id) is None:
            raise NotFound(code=SET_NOT_FOUND)
        await self._permission_sets.delete_many([permission_set_id])
