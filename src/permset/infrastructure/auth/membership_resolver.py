"""Organization membership lookup through the store adapter."""

from permset.application.ports.store_adapter import StoreAdapter, Where
from permset.domain.value_objects import Relation
from permset.infrastructure.persistence.errors import store_errors


class StoreMembershipResolver:
    """Finds the member row linking a user to an organization."""

    def __init__(self, store: StoreAdapter) -> None:
        self._store = store

    async def resolve_member_id(self, user_id: str, organization_id: str) -> str | None:
        with store_errors("resolve member"):
            row = await self._store.find_one(
                Relation.MEMBER,
                [Where("user_id", user_id), Where("organization_id", organization_id)],
            )
        return str(row["id"]) if row else None
