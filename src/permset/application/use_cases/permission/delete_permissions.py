"""Delete permissions use case."""

from collections.abc import Sequence

from permset.application.ports.repositories import PermissionRepository
from permset.domain.exceptions import NotFound


class DeletePermissionsUseCase:
    """Delete permissions together with every assignment referencing them."""

    def __init__(self, permissions: PermissionRepository) -> None:
        self._permissions = permissions

    async def execute(self, permission_ids: Sequence[str]) -> int:
        """Delete many; returns how many permissions existed and were removed."""
        return await self._permissions.delete_many(permission_ids)

    async def execute_one(self, permission_id: str) -> None:
        if await self._permissions.get_by_id(permission_id) is None:
            raise NotFound()
        await self._permissions.delete_many([permission_id])
