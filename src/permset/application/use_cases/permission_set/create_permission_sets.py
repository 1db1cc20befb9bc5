"""Create permission sets use case."""

from collections.abc import Sequence

from permset.application.dto.permission_set_dto import PermissionSetCreateInput
from permset.application.ports.repositories import PermissionSetRepository
from permset.application.services.mode_policy import check_organization_scope
from permset.domain.entities import PermissionSet
from permset.domain.value_objects import AuthorizationMode


class CreatePermissionSetsUseCase:
    def __init__(self, permission_sets: PermissionSetRepository, mode: AuthorizationMode) -> None:
        self._permission_sets = permission_sets
        self._mode = mode

    async def execute(self, inputs: Sequence[PermissionSetCreateInput]) -> list[PermissionSet]:
        for item in inputs:
            check_organization_scope(self._mode, item.organization_id)
        return await self._permission_sets.create_many(
            [item.model_dump(exclude_none=True) for item in inputs]
        )
