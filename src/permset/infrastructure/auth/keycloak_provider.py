"""Keycloak OIDC provider - resolves bearer tokens into session users."""

import logging
from dataclasses import dataclass, field
from typing import Any

from keycloak import KeycloakOpenID
from keycloak.exceptions import KeycloakError

logger = logging.getLogger(__name__)

# Claims exposed to condition templates as ``{{user.<claim>}}``
_USER_CLAIMS = ("email", "preferred_username", "name", "given_name", "family_name")


@dataclass
class SessionUser:
    """Authenticated user from an introspected token."""

    user_id: str
    email: str | None = None
    username: str | None = None
    attributes: dict[str, Any] = field(default_factory=dict)


class KeycloakProvider:
    """Keycloak OIDC - validates access tokens via introspection."""

    def __init__(
        self,
        server_url: str,
        realm: str,
        client_id: str,
        client_secret: str = "",
    ) -> None:
        self._keycloak = KeycloakOpenID(
            server_url=server_url,
            realm_name=realm,
            client_id=client_id,
            client_secret_key=client_secret,
        )

    def decode_token(self, token: str) -> SessionUser | None:
        """Introspect the token; None when it is inactive or cannot be checked."""
        try:
            token_info = self._keycloak.introspect(token)
        except KeycloakError as e:
            logger.warning("Token introspection failed: %s", e)
            return None
        if not token_info.get("active") or not token_info.get("sub"):
            return None
        user_id = str(token_info["sub"])
        attributes: dict[str, Any] = {"id": user_id}
        for claim in _USER_CLAIMS:
            if isinstance(token_info.get(claim), str):
                attributes[claim] = token_info[claim]
        return SessionUser(
            user_id=user_id,
            email=token_info.get("email"),
            username=token_info.get("preferred_username"),
            attributes=attributes,
        )
