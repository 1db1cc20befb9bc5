"""Update permission set use case."""

from permset.application.dto.permission_set_dto import PermissionSetUpdateInput
from permset.application.ports.repositories import PermissionSetRepository
from permset.application.services.mode_policy import check_organization_scope
from permset.application.use_cases.permission_set.get_permission_set import SET_NOT_FOUND
from permset.domain.entities import PermissionSet
from permset.domain.exceptions import NotFound, ValidationFailed
from permset.domain.value_objects import AuthorizationMode


class UpdatePermissionSetUseCase:
    """Partial update of name, description or organization."""

    def __init__(self, permission_sets: PermissionSetRepository, mode: AuthorizationMode) -> None:
        self._permission_sets = permission_sets
        self._mode = mode

    async def execute(
        self, permission_set_id: str, changes: PermissionSetUpdateInput
    ) -> PermissionSet:
        values = changes.model_dump(exclude_unset=True)
        if "name" in values and values["name"] is None:
            raise ValidationFailed("name cannot be null", field="name")
        if "organization_id" in values:
            check_organization_scope(self._mode, values["organization_id"])
        permission_set = await self._permission_sets.update(permission_set_id, values)
        if permission_set is None:
            raise NotFound(code=SET_NOT_FOUND)
        return permission_set
