"""Permission source - where an aggregated rule came from."""

from enum import StrEnum


class PermissionSource(StrEnum):
    """Provenance of a rule; drives priority ordering.

    Lower rank is applied earlier and can be overridden by higher ranks:
    organization-scoped set grants first, explicit user grants last.
    """

    MEMBER_PERMISSION_SET = "member_permission_set"
    MEMBER_DIRECT = "member_direct"
    USER_PERMISSION_SET = "user_permission_set"
    USER_DIRECT = "user_direct"

    @property
    def rank(self) -> int:
        return _SOURCE_RANK[self]


_SOURCE_RANK = {
    PermissionSource.MEMBER_PERMISSION_SET: 1,
    PermissionSource.MEMBER_DIRECT: 2,
    PermissionSource.USER_PERMISSION_SET: 3,
    PermissionSource.USER_DIRECT: 4,
}
