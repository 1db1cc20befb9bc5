"""Permission repository on top of the store adapter."""

import asyncio
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from permset.application.dto.pagination import ListQuery
from permset.application.ports.store_adapter import (
    SortBy,
    StoreAdapter,
    Where,
    supports_transactions,
)
from permset.domain.entities import Permission, PermissionSet
from permset.domain.services.rule_converter import (
    permission_from_storage,
    permission_set_from_storage,
    permission_to_storage,
)
from permset.domain.value_objects import Principal, Relation
from permset.infrastructure.persistence.assignment import (
    AssignmentManager,
    Link,
    principal_permission_link,
)
from permset.infrastructure.persistence.errors import store_errors
from permset.infrastructure.persistence.relations import RelationLoader, not_expired

_PERMISSION_SETS_OF_PERMISSION = Link(
    Relation.PERMISSION_PERMISSION_SET, "permission_id", "permission_set_id"
)


class StorePermissionRepository:
    """Permission repository implementation."""

    def __init__(
        self,
        store: StoreAdapter,
        assignments: AssignmentManager,
        relations: RelationLoader,
    ) -> None:
        self._store = store
        self._assignments = assignments
        self._relations = relations

    async def create_many(self, values: Sequence[Mapping[str, Any]]) -> list[Permission]:
        """Insert permissions, all in one transaction when the store has them."""
        if not values:
            return []
        now = datetime.now(UTC)
        rows = [
            permission_to_storage({**v, "id": v.get("id") or str(uuid4()), "created_at": now})
            for v in values
        ]
        with store_errors("create permissions"):
            if supports_transactions(self._store):
                async with self._store.transaction() as tx:
                    created = [await tx.create(Relation.PERMISSION, row) for row in rows]
            else:
                created = [await self._store.create(Relation.PERMISSION, row) for row in rows]
        return [permission_from_storage(r) for r in created]

    async def get_by_id(self, permission_id: str) -> Permission | None:
        with store_errors("get permission"):
            row = await self._store.find_one(Relation.PERMISSION, [Where("id", permission_id)])
        return permission_from_storage(row) if row else None

    async def find_by_name(
        self, name: str, organization_id: str | None = None
    ) -> Permission | None:
        where = [Where("name", name)]
        if organization_id:
            where.append(Where("organization_id", organization_id))
        with store_errors("find permission by name"):
            row = await self._store.find_one(Relation.PERMISSION, where)
        return permission_from_storage(row) if row else None

    async def list_page(self, query: ListQuery) -> tuple[list[Permission], int]:
        """Newest first; expired permissions excluded unless asked for."""
        where: list[Where] = []
        if query.search and query.search.strip():
            where.append(Where("name", query.search.strip(), operator="contains"))
        if query.organization_id:
            where.append(Where("organization_id", query.organization_id))
        if not query.include_expired:
            where.extend(not_expired(datetime.now(UTC)))
        with store_errors("list permissions"):
            rows, total = await asyncio.gather(
                self._store.find_many(
                    Relation.PERMISSION,
                    where,
                    limit=query.limit,
                    offset=query.offset,
                    sort_by=SortBy("created_at", "desc"),
                ),
                self._store.count(Relation.PERMISSION, where),
            )
        return [permission_from_storage(r) for r in rows], total

    async def update(
        self, permission_id: str, values: Mapping[str, Any]
    ) -> Permission | None:
        data = permission_to_storage(values)
        data["updated_at"] = datetime.now(UTC)
        with store_errors("update permission"):
            row = await self._store.update(
                Relation.PERMISSION, [Where("id", permission_id)], data
            )
        return permission_from_storage(row) if row else None

    async def delete_many(self, permission_ids: Sequence[str]) -> int:
        return await self._assignments.cascade_delete(Relation.PERMISSION, permission_ids)

    async def permission_sets_for(
        self, permission_ids: Sequence[str]
    ) -> dict[str, list[PermissionSet]]:
        with store_errors("load permission sets for permissions"):
            related = await self._relations.load(
                _PERMISSION_SETS_OF_PERMISSION, permission_ids, Relation.PERMISSION_SET
            )
        return {
            pid: [permission_set_from_storage(r) for r in rows]
            for pid, rows in related.items()
        }

    async def principals_for(
        self, permission_ids: Sequence[str], principal: Principal
    ) -> dict[str, list[dict[str, Any]]]:
        with store_errors(f"load {principal}s for permissions"):
            return await self._relations.load(
                principal_permission_link(principal), permission_ids, Relation(principal.value)
            )

    async def assign(
        self, permission_id: str, principal: Principal, principal_ids: Sequence[str]
    ) -> None:
        await self._assignments.assign(
            principal_permission_link(principal), permission_id, principal_ids
        )

    async def remove(
        self, permission_id: str, principal: Principal, principal_ids: Sequence[str]
    ) -> None:
        await self._assignments.remove(
            principal_permission_link(principal), permission_id, principal_ids
        )
