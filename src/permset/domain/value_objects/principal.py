"""Principal kinds that can hold permissions."""

from enum import StrEnum

from permset.domain.value_objects.relation import Relation


class Principal(StrEnum):
    """A user (global identity) or a member (user scoped to one organization)."""

    USER = "user"
    MEMBER = "member"

    @property
    def id_field(self) -> str:
        return f"{self.value}_id"

    @property
    def permission_link(self) -> Relation:
        return Relation(f"{self.value}_permission")

    @property
    def permission_set_link(self) -> Relation:
        return Relation(f"{self.value}_permission_set")
