"""Authorization API resources - permission checks and ability snapshots."""

import falcon
import falcon.asgi

from permset.application.dto.authorization_dto import CheckPermissionInput
from permset.application.use_cases.authorization.check_permission import (
    CheckPermissionUseCase,
)
from permset.application.use_cases.authorization.get_ability import GetAbilityUseCase
from permset.interfaces.api.resources.serialization import rule_to_dict


class CheckPermissionResource:
    """POST /v1/check-permission - evaluate one request."""

    def __init__(self, check_permission: CheckPermissionUseCase) -> None:
        self._check = check_permission

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        request = CheckPermissionInput.model_validate(await req.get_media())
        user = getattr(req.context, "user", None)
        result = await self._check.execute(request, user.attributes if user else None)
        resp.media = result.to_dict()
        resp.status = falcon.HTTP_200


class AbilityResource:
    """GET /v1/ability - rules of the session user in the active organization."""

    def __init__(self, get_ability: GetAbilityUseCase) -> None:
        self._get_ability = get_ability

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        user = getattr(req.context, "user", None)
        snapshot = await self._get_ability.execute(
            user.user_id if user else None,
            getattr(req.context, "organization_id", None),
        )
        resp.media = {
            "user_id": snapshot.user_id,
            "member_id": snapshot.member_id,
            "rules": [rule_to_dict(r) for r in snapshot.rules],
        }
        resp.status = falcon.HTTP_200
