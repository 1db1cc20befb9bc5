"""Revoke permission use case."""

from collections.abc import Sequence

from permset.application.ports.repositories import PermissionRepository
from permset.application.services.mode_policy import check_principal_enabled
from permset.domain.value_objects import AuthorizationMode, Principal


class RevokePermissionUseCase:
    """Remove direct grants of a permission; unknown pairs are ignored."""

    def __init__(self, permissions: PermissionRepository, mode: AuthorizationMode) -> None:
        self._permissions = permissions
        self._mode = mode

    async def execute(
        self, permission_id: str, principal: Principal, principal_ids: Sequence[str]
    ) -> None:
        check_principal_enabled(self._mode, principal)
        await self._permissions.remove(permission_id, principal, principal_ids)
