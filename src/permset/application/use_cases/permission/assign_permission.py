"""Assign permission use case."""

from collections.abc import Sequence

from permset.application.ports.repositories import PermissionRepository
from permset.application.services.mode_policy import check_principal_enabled
from permset.domain.exceptions import NotFound
from permset.domain.value_objects import AuthorizationMode, Principal


class AssignPermissionUseCase:
    """Grant a permission directly to users or members. Re-assigning is a no-op."""

    def __init__(self, permissions: PermissionRepository, mode: AuthorizationMode) -> None:
        self._permissions = permissions
        self._mode = mode

    async def execute(
        self, permission_id: str, principal: Principal, principal_ids: Sequence[str]
    ) -> int:
        """Returns the number of principals now holding the permission from this call."""
        check_principal_enabled(self._mode, principal)
        if await self._permissions.get_by_id(permission_id) is None:
            raise NotFound()
        await self._permissions.assign(permission_id, principal, principal_ids)
        return len(set(principal_ids))
