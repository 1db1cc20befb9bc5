"""Permission set repository on top of the store adapter."""

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
)
from permset.domain.value_objects import Principal, Relation
from permset.infrastructure.persistence.assignment import (
    PERMISSION_SET_PERMISSIONS,
    AssignmentManager,
    principal_permission_set_link,
)
from permset.infrastructure.persistence.errors import store_errors
from permset.infrastructure.persistence.relations import RelationLoader


class StorePermissionSetRepository:
    """Permission set repository implementation."""

    def __init__(
        self,
        store: StoreAdapter,
        assignments: AssignmentManager,
        relations: RelationLoader,
    ) -> None:
        self._store = store
        self._assignments = assignments
        self._relations = relations

    async def create_many(
        self, values: Sequence[Mapping[str, Any]]
    ) -> list[PermissionSet]:
        if not values:
            return []
        now = datetime.now(UTC)
        rows = [{**v, "id": v.get("id") or str(uuid4()), "created_at": now} for v in values]
        with store_errors("create permission sets"):
            if supports_transactions(self._store):
                async with self._store.transaction() as tx:
                    created = [await tx.create(Relation.PERMISSION_SET, row) for row in rows]
            else:
                created = [
                    await self._store.create(Relation.PERMISSION_SET, row) for row in rows
                ]
        return [permission_set_from_storage(r) for r in created]

    async def get_by_id(self, permission_set_id: str) -> PermissionSet | None:
        with store_errors("get permission set"):
            row = await self._store.find_one(
                Relation.PERMISSION_SET, [Where("id", permission_set_id)]
            )
        return permission_set_from_storage(row) if row else None

    async def find_by_name(
        self, name: str, organization_id: str | None = None
    ) -> PermissionSet | None:
        where = [Where("name", name)]
        if organization_id:
            where.append(Where("organization_id", organization_id))
        with store_errors("find permission set by name"):
            row = await self._store.find_one(Relation.PERMISSION_SET, where)
        return permission_set_from_storage(row) if row else None

    async def list_page(self, query: ListQuery) -> tuple[list[PermissionSet], int]:
        where: list[Where] = []
        if query.search and query.search.strip():
            where.append(Where("name", query.search.strip(), operator="contains"))
        if query.organization_id:
            where.append(Where("organization_id", query.organization_id))
        with store_errors("list permission sets"):
            rows, total = await asyncio.gather(
                self._store.find_many(
                    Relation.PERMISSION_SET,
                    where,
                    limit=query.limit,
                    offset=query.offset,
                    sort_by=SortBy("created_at", "desc"),
                ),
                self._store.count(Relation.PERMISSION_SET, where),
            )
        return [permission_set_from_storage(r) for r in rows], total

    async def update(
        self, permission_set_id: str, values: Mapping[str, Any]
    ) -> PermissionSet | None:
        data = {**values, "updated_at": datetime.now(UTC)}
        with store_errors("update permission set"):
            row = await self._store.update(
                Relation.PERMISSION_SET, [Where("id", permission_set_id)], data
            )
        return permission_set_from_storage(row) if row else None

    async def delete_many(self, permission_set_ids: Sequence[str]) -> int:
        return await self._assignments.cascade_delete(
            Relation.PERMISSION_SET, permission_set_ids
        )

    async def permissions_for(
        self, permission_set_ids: Sequence[str]
    ) -> dict[str, list[Permission]]:
        with store_errors("load permissions for permission sets"):
            related = await self._relations.load(
                PERMISSION_SET_PERMISSIONS, permission_set_ids, Relation.PERMISSION
            )
        return {
            sid: [permission_from_storage(r) for r in rows] for sid, rows in related.items()
        }

    async def principals_for(
        self, permission_set_ids: Sequence[str], principal: Principal
    ) -> dict[str, list[dict[str, Any]]]:
        with store_errors(f"load {principal}s for permission sets"):
            return await self._relations.load(
                principal_permission_set_link(principal),
                permission_set_ids,
                Relation(principal.value),
            )

    async def assign_permissions(
        self, permission_set_id: str, permission_ids: Sequence[str]
    ) -> None:
        await self._assignments.assign(
            PERMISSION_SET_PERMISSIONS, permission_set_id, permission_ids
        )

    async def remove_permissions(
        self, permission_set_id: str, permission_ids: Sequence[str]
    ) -> None:
        await self._assignments.remove(
            PERMISSION_SET_PERMISSIONS, permission_set_id, permission_ids
        )

    async def assign(
        self, permission_set_id: str, principal: Principal, principal_ids: Sequence[str]
    ) -> None:
        await self._assignments.assign(
            principal_permission_set_link(principal), permission_set_id, principal_ids
        )

    async def remove(
        self, permission_set_id: str, principal: Principal, principal_ids: Sequence[str]
    ) -> None:
        await self._assignments.remove(
            principal_permission_set_link(principal), permission_set_id, principal_ids
        )
