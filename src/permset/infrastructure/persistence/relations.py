"""Batched "X for Y" relation loading through junction tables."""

from collections.abc import Sequence
from datetime import datetime

from permset.application.ports.store_adapter import Row, StoreAdapter, Where
from permset.application.services.batching import BATCH_CHUNK_SIZE, chunk_list
from permset.domain.value_objects import Relation
from permset.infrastructure.persistence.assignment import Link


def not_expired(now: datetime) -> list[Where]:
    """Rows without an expiry, or expiring after ``now``."""
    return [
        Where("expires_at", None, connector="OR"),
        Where("expires_at", now, operator="gt", connector="OR"),
    ]


class RelationLoader:
    """Resolves parent ids to related rows in two chunked hops.

    Link rows are fetched per chunk of parent ids, then target rows per chunk
    of distinct child ids; every query is capped at ``max_relation_limit``.
    """

    def __init__(
        self,
        store: StoreAdapter,
        chunk_size: int = BATCH_CHUNK_SIZE,
        max_relation_limit: int = 10_000,
    ) -> None:
        self._store = store
        self._chunk_size = chunk_size
        self._limit = max_relation_limit

    async def child_ids(self, link: Link, parent_id: str) -> list[str]:
        """Ids linked to a single parent, in link order."""
        rows = await self._store.find_many(
            link.model, [Where(link.parent_field, parent_id)], limit=self._limit
        )
        return list(dict.fromkeys(str(r[link.child_field]) for r in rows))

    async def load(
        self,
        link: Link,
        parent_ids: Sequence[str],
        target: Relation,
        target_where: Sequence[Where] = (),
    ) -> dict[str, list[Row]]:
        """Map each parent id to its related target rows.

        Parents without (surviving) related rows are absent from the result.
        """
        result: dict[str, list[Row]] = {}
        for chunk in chunk_list(list(dict.fromkeys(parent_ids)), self._chunk_size):
            links = await self._store.find_many(
                link.model,
                [Where(link.parent_field, chunk, operator="in")],
                limit=self._limit,
            )
            if not links:
                continue
            child_ids = list(dict.fromkeys(str(r[link.child_field]) for r in links))
            targets: dict[str, Row] = {}
            for child_chunk in chunk_list(child_ids, self._chunk_size):
                rows = await self._store.find_many(
                    target,
                    [Where("id", child_chunk, operator="in"), *target_where],
                    limit=self._limit,
                )
                targets.update((str(r["id"]), r) for r in rows)
            for row in links:
                related = targets.get(str(row[link.child_field]))
                if related is not None:
                    result.setdefault(str(row[link.parent_field]), []).append(related)
        return result
