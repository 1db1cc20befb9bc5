"""Authorization mode - which identities carry permissions."""

from enum import StrEnum


class AuthorizationMode(StrEnum):
    """user: users only; member: organization members only; both: either."""

    USER = "user"
    MEMBER = "member"
    BOTH = "both"

    @property
    def includes_users(self) -> bool:
        return self in (AuthorizationMode.USER, AuthorizationMode.BOTH)

    @property
    def includes_members(self) -> bool:
        return self in (AuthorizationMode.MEMBER, AuthorizationMode.BOTH)
