"""Revoke permission set use case."""

from collections.abc import Sequence

from permset.application.ports.repositories import PermissionSetRepository
from permset.application.services.mode_policy import check_principal_enabled
from permset.domain.value_objects import AuthorizationMode, Principal


class RevokePermissionSetUseCase:
    def __init__(self, permission_sets: PermissionSetRepository, mode: AuthorizationMode) -> None:
        self._permission_sets = permission_sets
        self._mode = mode

    async def execute(
        self, permission_set_id: str, principal: Principal, principal_ids: Sequence[str]
    ) -> None:
        check_principal_enabled(self._mode, principal)
        await self._permission_sets.remove(permission_set_id, principal, principal_ids)
