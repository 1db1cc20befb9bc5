"""Create permissions use case."""

from collections.abc import Sequence

from permset.application.dto.permission_dto import PermissionCreateInput
from permset.application.ports.repositories import PermissionRepository
from permset.application.services.mode_policy import (
    check_condition_templates,
    check_organization_scope,
)
from permset.domain.entities import Permission
from permset.domain.value_objects import AuthorizationMode


class CreatePermissionsUseCase:
    """Validate and insert one or many permissions (all or nothing when transactional)."""

    def __init__(self, permissions: PermissionRepository, mode: AuthorizationMode) -> None:
        self._permissions = permissions
        self._mode = mode

    async def execute(self, inputs: Sequence[PermissionCreateInput]) -> list[Permission]:
        for item in inputs:
            check_organization_scope(self._mode, item.organization_id)
            if item.conditions:
                check_condition_templates(item.conditions)
        return await self._permissions.create_many(
            [item.model_dump(exclude_none=True) for item in inputs]
        )
