"""Permission API resources."""

import falcon
import falcon.asgi

from permset.application.dto.authorization_dto import IdsInput
from permset.application.dto.permission_dto import (
    PermissionCreateInput,
    PermissionUpdateInput,
)
from permset.application.use_cases.permission.assign_permission import AssignPermissionUseCase
from permset.application.use_cases.permission.create_permissions import (
    CreatePermissionsUseCase,
)
from permset.application.use_cases.permission.delete_permissions import (
    DeletePermissionsUseCase,
)
from permset.application.use_cases.permission.get_permission import GetPermissionUseCase
from permset.application.use_cases.permission.list_permissions import ListPermissionsUseCase
from permset.application.use_cases.permission.revoke_permission import RevokePermissionUseCase
from permset.application.use_cases.permission.update_permission import (
    UpdatePermissionUseCase,
)
from permset.domain.value_objects import Principal
from permset.interfaces.api.resources.serialization import (
    includes,
    list_query,
    page_to_dict,
    permission_details_to_dict,
    permission_to_dict,
)

_INCLUDES = ("permission_sets", "users", "members")
_ASSIGNEES = {"users": Principal.USER, "members": Principal.MEMBER}


class PermissionsResource:
    """GET/POST /v1/permissions - list and create permissions."""

    def __init__(
        self,
        list_permissions: ListPermissionsUseCase,
        create_permissions: CreatePermissionsUseCase,
        default_limit: int = 100,
        max_limit: int = 1000,
    ) -> None:
        self._list = list_permissions
        self._create = create_permissions
        self._default_limit = default_limit
        self._max_limit = max_limit

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        page = await self._list.execute(
            list_query(req, self._default_limit, self._max_limit),
            **includes(req, _INCLUDES),
        )
        resp.media = page_to_dict(page, permission_details_to_dict)
        resp.status = falcon.HTTP_200

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Create one permission (object body) or many (array body)."""
        body = await req.get_media()
        if isinstance(body, list):
            inputs = [PermissionCreateInput.model_validate(item) for item in body]
            created = await self._create.execute(inputs)
            resp.media = {"items": [permission_to_dict(p) for p in created]}
        else:
            [created] = await self._create.execute([PermissionCreateInput.model_validate(body)])
            resp.media = permission_to_dict(created)
        resp.status = falcon.HTTP_201


class PermissionsDeleteResource:
    """POST /v1/permissions/delete - delete many permissions."""

    def __init__(self, delete_permissions: DeletePermissionsUseCase) -> None:
        self._delete = delete_permissions

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        body = IdsInput.model_validate(await req.get_media())
        count = await self._delete.execute(body.ids)
        resp.media = {"count": count, "deleted_ids": body.ids}
        resp.status = falcon.HTTP_200


class PermissionResource:
    """GET/PATCH/DELETE /v1/permissions/{permission_id}."""

    def __init__(
        self,
        get_permission: GetPermissionUseCase,
        update_permission: UpdatePermissionUseCase,
        delete_permissions: DeletePermissionsUseCase,
    ) -> None:
        self._get = get_permission
        self._update = update_permission
        self._delete = delete_permissions

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, permission_id: str
    ) -> None:
        details = await self._get.execute(permission_id, **includes(req, _INCLUDES))
        resp.media = permission_details_to_dict(details)
        resp.status = falcon.HTTP_200

    async def on_patch(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, permission_id: str
    ) -> None:
        changes = PermissionUpdateInput.model_validate(await req.get_media())
        permission = await self._update.execute(permission_id, changes)
        resp.media = permission_to_dict(permission)
        resp.status = falcon.HTTP_200

    async def on_delete(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, permission_id: str
    ) -> None:
        await self._delete.execute_one(permission_id)
        resp.status = falcon.HTTP_204


class PermissionAssigneesResource:
    """POST/DELETE /v1/permissions/{permission_id}/{assignee} - grant to users or members."""

    def __init__(
        self,
        assign_permission: AssignPermissionUseCase,
        revoke_permission: RevokePermissionUseCase,
    ) -> None:
        self._assign = assign_permission
        self._revoke = revoke_permission

    @staticmethod
    def _principal(assignee: str) -> Principal:
        if assignee not in _ASSIGNEES:
            raise falcon.HTTPNotFound()
        return _ASSIGNEES[assignee]

    async def on_post(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        permission_id: str,
        assignee: str,
    ) -> None:
        principal = self._principal(assignee)
        body = IdsInput.model_validate(await req.get_media())
        assigned = await self._assign.execute(permission_id, principal, body.ids)
        resp.media = {"assigned_count": assigned}
        resp.status = falcon.HTTP_200

    async def on_delete(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        permission_id: str,
        assignee: str,
    ) -> None:
        principal = self._principal(assignee)
        body = IdsInput.model_validate(await req.get_media())
        await self._revoke.execute(permission_id, principal, body.ids)
        resp.status = falcon.HTTP_204
