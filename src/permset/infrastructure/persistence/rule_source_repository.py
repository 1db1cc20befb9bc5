"""Rule source reads for the permission aggregator."""

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from permset.domain.value_objects import Principal, Relation
from permset.infrastructure.persistence.assignment import PERMISSION_SET_PERMISSIONS, Link
from permset.infrastructure.persistence.errors import store_errors
from permset.infrastructure.persistence.relations import RelationLoader, not_expired


class StoreRuleSourceRepository:
    """Unexpired permission rows reachable from a user or member."""

    def __init__(self, relations: RelationLoader) -> None:
        self._relations = relations

    async def direct_permissions(
        self, principal: Principal, principal_id: str
    ) -> list[dict[str, Any]]:
        link = Link(principal.permission_link, principal.id_field, "permission_id")
        with store_errors(f"get {principal} permissions"):
            related = await self._relations.load(
                link,
                [principal_id],
                Relation.PERMISSION,
                target_where=not_expired(datetime.now(UTC)),
            )
        return related.get(principal_id, [])

    async def permission_set_ids(
        self, principal: Principal, principal_id: str
    ) -> list[str]:
        link = Link(principal.permission_set_link, principal.id_field, "permission_set_id")
        with store_errors(f"get {principal} permission sets"):
            return await self._relations.child_ids(link, principal_id)

    async def permissions_for_sets(
        self, permission_set_ids: Sequence[str]
    ) -> dict[str, list[dict[str, Any]]]:
        with store_errors("get permissions for permission sets"):
            return await self._relations.load(
                PERMISSION_SET_PERMISSIONS,
                permission_set_ids,
                Relation.PERMISSION,
                target_where=not_expired(datetime.now(UTC)),
            )
