"""Store relation names."""

from enum import StrEnum


class Relation(StrEnum):
    """Tables the authorization core reads and writes."""

    PERMISSION = "permission"
    PERMISSION_SET = "permission_set"
    USER_PERMISSION = "user_permission"
    MEMBER_PERMISSION = "member_permission"
    USER_PERMISSION_SET = "user_permission_set"
    MEMBER_PERMISSION_SET = "member_permission_set"
    PERMISSION_PERMISSION_SET = "permission_permission_set"
    # Owned by the identity subsystem, read-only here
    USER = "user"
    MEMBER = "member"
