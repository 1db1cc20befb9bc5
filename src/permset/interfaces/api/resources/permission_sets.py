"""Permission set API resources."""

import falcon
import falcon.asgi

from permset.application.dto.authorization_dto import IdsInput
from permset.application.dto.permission_set_dto import (
    PermissionSetCreateInput,
    PermissionSetUpdateInput,
)
from permset.application.use_cases.permission_set.assign_permission_set import (
    AssignPermissionSetUseCase,
)
from permset.application.use_cases.permission_set.create_permission_sets import (
    CreatePermissionSetsUseCase,
)
from permset.application.use_cases.permission_set.delete_permission_sets import (
    DeletePermissionSetsUseCase,
)
from permset.application.use_cases.permission_set.get_permission_set import (
    GetPermissionSetUseCase,
)
from permset.application.use_cases.permission_set.list_permission_sets import (
    ListPermissionSetsUseCase,
)
from permset.application.use_cases.permission_set.manage_set_permissions import (
    ManageSetPermissionsUseCase,
)
from permset.application.use_cases.permission_set.revoke_permission_set import (
    RevokePermissionSetUseCase,
)
from permset.application.use_cases.permission_set.update_permission_set import (
    UpdatePermissionSetUseCase,
)
from permset.domain.value_objects import Principal
from permset.interfaces.api.resources.serialization import (
    includes,
    list_query,
    page_to_dict,
    permission_set_details_to_dict,
    permission_set_to_dict,
)

_INCLUDES = ("permissions", "users", "members")
_PRINCIPALS = {"users": Principal.USER, "members": Principal.MEMBER}


class PermissionSetsResource:
    """GET/POST /v1/permission-sets - list and create permission sets."""

    def __init__(
        self,
        list_permission_sets: ListPermissionSetsUseCase,
        create_permission_sets: CreatePermissionSetsUseCase,
        default_limit: int = 100,
        max_limit: int = 1000,
    ) -> None:
        self._list = list_permission_sets
        self._create = create_permission_sets
        self._default_limit = default_limit
        self._max_limit = max_limit

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        page = await self._list.execute(
            list_query(req, self._default_limit, self._max_limit),
            **includes(req, _INCLUDES),
        )
        resp.media = page_to_dict(page, permission_set_details_to_dict)
        resp.status = falcon.HTTP_200

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        body = await req.get_media()
        if isinstance(body, list):
            inputs = [PermissionSetCreateInput.model_validate(item) for item in body]
            created = await self._create.execute(inputs)
            resp.media = {"items": [permission_set_to_dict(s) for s in created]}
        else:
            [created] = await self._create.execute(
                [PermissionSetCreateInput.model_validate(body)]
            )
            resp.media = permission_set_to_dict(created)
        resp.status = falcon.HTTP_201


class PermissionSetsDeleteResource:
    """POST /v1/permission-sets/delete - delete many permission sets."""

    def __init__(self, delete_permission_sets: DeletePermissionSetsUseCase) -> None:
        self._delete = delete_permission_sets

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        body = IdsInput.model_validate(await req.get_media())
        count = await self._delete.execute(body.ids)
        resp.media = {"count": count, "deleted_ids": body.ids}
        resp.status = falcon.HTTP_200


class PermissionSetResource:
    """GET/PATCH/DELETE /v1/permission-sets/{permission_set_id}."""

    def __init__(
        self,
        get_permission_set: GetPermissionSetUseCase,
        update_permission_set: UpdatePermissionSetUseCase,
        delete_permission_sets: DeletePermissionSetsUseCase,
    ) -> None:
        self._get = get_permission_set
        self._update = update_permission_set
        self._delete = delete_permission_sets

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, permission_set_id: str
    ) -> None:
        details = await self._get.execute(permission_set_id, **includes(req, _INCLUDES))
        resp.media = permission_set_details_to_dict(details)
        resp.status = falcon.HTTP_200

    async def on_patch(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, permission_set_id: str
    ) -> None:
        changes = PermissionSetUpdateInput.model_validate(await req.get_media())
        permission_set = await self._update.execute(permission_set_id, changes)
        resp.media = permission_set_to_dict(permission_set)
        resp.status = falcon.HTTP_200

    async def on_delete(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, permission_set_id: str
    ) -> None:
        await self._delete.execute_one(permission_set_id)
        resp.status = falcon.HTTP_204


class PermissionSetAssigneesResource:
    """POST/DELETE /v1/permission-sets/{permission_set_id}/{assignee}.

    ``assignee`` is ``permissions``, ``users`` or ``members``.
    """

    def __init__(
        self,
        manage_permissions: ManageSetPermissionsUseCase,
        assign_permission_set: AssignPermissionSetUseCase,
        revoke_permission_set: RevokePermissionSetUseCase,
    ) -> None:
        self._permissions = manage_permissions
        self._assign = assign_permission_set
        self._revoke = revoke_permission_set

    async def on_post(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        permission_set_id: str,
        assignee: str,
    ) -> None:
        if assignee != "permissions" and assignee not in _PRINCIPALS:
            raise falcon.HTTPNotFound()
        body = IdsInput.model_validate(await req.get_media())
        if assignee == "permissions":
            assigned = await self._permissions.add(permission_set_id, body.ids)
        else:
            assigned = await self._assign.execute(
                permission_set_id, _PRINCIPALS[assignee], body.ids
            )
        resp.media = {"assigned_count": assigned}
        resp.status = falcon.HTTP_200

    async def on_delete(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        permission_set_id: str,
        assignee: str,
    ) -> None:
        if assignee != "permissions" and assignee not in _PRINCIPALS:
            raise falcon.HTTPNotFound()
        body = IdsInput.model_validate(await req.get_media())
        if assignee == "permissions":
            await self._permissions.remove(permission_set_id, body.ids)
        else:
            await self._revoke.execute(permission_set_id, _PRINCIPALS[assignee], body.ids)
        resp.status = falcon.HTTP_204
