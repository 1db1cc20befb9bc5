"""Update permission use case."""

from permset.application.dto.permission_dto import PermissionUpdateInput
from permset.application.ports.repositories import PermissionRepository
from permset.application.services.mode_policy import (
    check_condition_templates,
    check_organization_scope,
)
from permset.domain.entities import Permission
from permset.domain.exceptions import NotFound, ValidationFailed
from permset.domain.value_objects import AuthorizationMode

_REQUIRED = ("name", "action", "inverted")


class UpdatePermissionUseCase:
    """Partial update; fields not supplied keep their value, assignments are untouched."""

    def __init__(self, permissions: PermissionRepository, mode: AuthorizationMode) -> None:
        self._permissions = permissions
        self._mode = mode

    async def execute(self, permission_id: str, changes: PermissionUpdateInput) -> Permission:
        values = changes.model_dump(exclude_unset=True)
        for key in _REQUIRED:
            if key in values and values[key] is None:
                raise ValidationFailed(f"{key} cannot be null", field=key)
        if "organization_id" in values:
            check_organization_scope(self._mode, values["organization_id"])
        if values.get("conditions"):
            check_condition_templates(values["conditions"])
        permission = await self._permissions.update(permission_id, values)
        if permission is None:
            raise NotFound()
        return permission
