"""Idempotent junction assignment and cascading deletes."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from permset.application.ports.store_adapter import (
    StoreAdapter,
    Where,
    is_duplicate_key_error,
    supports_transactions,
)
from permset.application.services.batching import BATCH_CHUNK_SIZE, chunk_list
from permset.domain.value_objects import Principal, Relation
from permset.infrastructure.persistence.errors import store_errors

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Link:
    """A junction table viewed from one side: parent -> children."""

    model: Relation
    parent_field: str
    child_field: str


def principal_permission_link(principal: Principal) -> Link:
    return Link(principal.permission_link, "permission_id", principal.id_field)


def principal_permission_set_link(principal: Principal) -> Link:
    return Link(principal.permission_set_link, "permission_set_id", principal.id_field)


PERMISSION_SET_PERMISSIONS = Link(
    Relation.PERMISSION_PERMISSION_SET, "permission_set_id", "permission_id"
)

# Junction rows referencing each parent kind, in deletion order.
CASCADE_PLANS: dict[Relation, tuple[tuple[Relation, str], ...]] = {
    Relation.PERMISSION: (
        (Relation.USER_PERMISSION, "permission_id"),
        (Relation.MEMBER_PERMISSION, "permission_id"),
        (Relation.PERMISSION_PERMISSION_SET, "permission_id"),
    ),
    Relation.PERMISSION_SET: (
        (Relation.USER_PERMISSION_SET, "permission_set_id"),
        (Relation.MEMBER_PERMISSION_SET, "permission_set_id"),
        (Relation.PERMISSION_PERMISSION_SET, "permission_set_id"),
    ),
}


class AssignmentManager:
    """Keeps junction tables consistent with their parents.

    Without store transactions, cascade deletes degrade to an ordered
    best-effort sequence: a failure part way leaves the junction rows already
    deleted gone while the parent row survives.
    """

    def __init__(self, store: StoreAdapter, chunk_size: int = BATCH_CHUNK_SIZE) -> None:
        self._store = store
        self._chunk_size = chunk_size

    async def _insert_link(self, link: Link, parent_id: str, child_id: str) -> None:
        row = {link.parent_field: parent_id, link.child_field: child_id}
        try:
            if supports_transactions(self._store):
                async with self._store.transaction() as tx:
                    await tx.create(link.model, row)
            else:
                await self._store.create(link.model, row)
        except Exception as e:
            if is_duplicate_key_error(e):
                logger.debug("%s already linked to %s in %s", child_id, parent_id, link.model)
                return
            raise

    async def assign(self, link: Link, parent_id: str, child_ids: Sequence[str]) -> None:
        """Insert missing junction rows; existing ones are left as they are.

        Chunks run one after another, inserts within a chunk concurrently.
        Safe to retry in full after a partial failure.
        """
        ids = list(dict.fromkeys(child_ids))
        if not ids:
            return
        with store_errors(f"assign to {link.model}"):
            for chunk in chunk_list(ids, self._chunk_size):
                await asyncio.gather(
                    *(self._insert_link(link, parent_id, child_id) for child_id in chunk)
                )

    async def remove(self, link: Link, parent_id: str, child_ids: Sequence[str]) -> None:
        """Delete junction rows; missing rows are not an error."""
        ids = list(dict.fromkeys(child_ids))
        if not ids:
            return
        with store_errors(f"remove from {link.model}"):
            if supports_transactions(self._store):
                async with self._store.transaction() as tx:
                    await self._remove_chunks(tx, link, parent_id, ids)
            else:
                await self._remove_chunks(self._store, link, parent_id, ids)

    async def _remove_chunks(
        self, store: StoreAdapter, link: Link, parent_id: str, ids: list[str]
    ) -> None:
        for chunk in chunk_list(ids, self._chunk_size):
            await store.delete_many(
                link.model,
                [
                    Where(link.parent_field, parent_id),
                    Where(link.child_field, chunk, operator="in"),
                ],
            )

    async def cascade_delete(self, parent: Relation, ids: Sequence[str]) -> int:
        """Delete parents and every junction row referencing them.

        Returns the number of parent rows actually deleted.
        """
        plan = CASCADE_PLANS[parent]
        unique_ids = list(dict.fromkeys(ids))
        if not unique_ids:
            return 0
        with store_errors(f"delete {parent}", duplicate_code="CONSTRAINT_VIOLATION"):
            if supports_transactions(self._store):
                async with self._store.transaction() as tx:
                    return await self._cascade(tx, parent, plan, unique_ids)
            logger.debug("Store has no transactions; deleting %s without atomicity", parent)
            return await self._cascade(self._store, parent, plan, unique_ids)

    async def _cascade(
        self,
        store: StoreAdapter,
        parent: Relation,
        plan: tuple[tuple[Relation, str], ...],
        ids: list[str],
    ) -> int:
        chunks = chunk_list(ids, self._chunk_size)
        for model, field in plan:
            for chunk in chunks:
                await store.delete_many(model, [Where(field, chunk, operator="in")])
        deleted = 0
        for chunk in chunks:
            deleted += await store.delete_many(parent, [Where("id", chunk, operator="in")])
        return deleted
