"""Auth middleware - resolves the session user and active organization."""

from dataclasses import dataclass, field
from typing import Any

import falcon.asgi

from permset.infrastructure.auth.keycloak_provider import KeycloakProvider


@dataclass
class RequestUser:
    """User from request context."""

    user_id: str
    email: str | None = None
    username: str | None = None
    attributes: dict[str, Any] = field(default_factory=dict)


class AuthMiddleware:
    """Sets ``req.context.user`` (or None) and ``req.context.organization_id``."""

    def __init__(
        self,
        keycloak_provider: KeycloakProvider | None = None,
        organization_header: str = "X-Organization-Id",
    ) -> None:
        self._keycloak = keycloak_provider
        self._organization_header = organization_header

    async def process_request(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response
    ) -> None:
        req.context.organization_id = req.get_header(self._organization_header) or None
        req.context.user = None
        auth = req.get_header("Authorization")
        if not auth or not auth.startswith("Bearer ") or self._keycloak is None:
            return
        user = self._keycloak.decode_token(auth[7:])
        if user:
            req.context.user = RequestUser(
                user_id=user.user_id,
                email=user.email,
                username=user.username,
                attributes=user.attributes,
            )
