"""Assign permission set use case."""

from collections.abc import Sequence

from permset.application.ports.repositories import PermissionSetRepository
from permset.application.services.mode_policy import check_principal_enabled
from permset.application.use_cases.permission_set.get_permission_set import SET_NOT_FOUND
from permset.domain.exceptions import NotFound
from permset.domain.value_objects import AuthorizationMode, Principal


class AssignPermissionSetUseCase:
    """Give users or members every permission of a set."""

    def __init__(self, permission_sets: PermissionSetRepository, mode: AuthorizationMode) -> None:
        self._permission_sets = permission_sets
        self._mode = mode

    async def execute(
        self, permission_set_id: str, principal: Principal, principal_ids: Sequence[str]
    ) -> int:
        check_principal_enabled(self._mode, principal)
        if await self._permission_sets.get_by_id(permission_set_id) is None:
            raise NotFound(code=SET_NOT_FOUND)
        await self._permission_sets.assign(permission_set_id, principal, principal_ids)
        return len(set(principal_ids))
