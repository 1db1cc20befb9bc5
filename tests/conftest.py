"""Pytest fixtures for permset tests."""

from __future__ import annotations

import copy
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

import pytest

from permset.application.ports.store_adapter import (
    DuplicateKeyError,
    Row,
    SortBy,
    StoreError,
    Where,
)
from permset.domain.entities import Rule
from permset.domain.value_objects import PermissionSource, Relation

# --- Fake store adapters ---

_PRIMARY_KEYS: dict[str, tuple[str, ...]] = {
    Relation.USER_PERMISSION: ("user_id", "permission_id"),
    Relation.MEMBER_PERMISSION: ("member_id", "permission_id"),
    Relation.USER_PERMISSION_SET: ("user_id", "permission_set_id"),
    Relation.MEMBER_PERMISSION_SET: ("member_id", "permission_set_id"),
    Relation.PERMISSION_PERMISSION_SET: ("permission_set_id", "permission_id"),
}


def _compare(row_value: Any, clause: Where) -> bool:
    op, value = clause.operator, clause.value
    if op == "eq":
        return row_value is None if value is None else row_value == value
    if op == "ne":
        return row_value is not None if value is None else row_value != value
    if op == "in":
        return row_value in list(value or [])
    if op == "contains":
        return isinstance(row_value, str) and str(value) in row_value
    if row_value is None:
        return False
    if op == "gt":
        return row_value > value
    if op == "gte":
        return row_value >= value
    if op == "lt":
        return row_value < value
    if op == "lte":
        return row_value <= value
    raise ValueError(f"Unsupported operator: {op}")


def matches(row: Row, where: Sequence[Where]) -> bool:
    """AND clauses all hold, and at least one OR clause holds if there are any."""
    conjuncts = [c for c in where if c.connector == "AND"]
    disjuncts = [c for c in where if c.connector == "OR"]
    if not all(_compare(row.get(c.field), c) for c in conjuncts):
        return False
    return not disjuncts or any(_compare(row.get(c.field), c) for c in disjuncts)


class FakeStoreAdapter:
    """In-memory store adapter.

    Enforces primary-key uniqueness, rolls transactions back from a snapshot,
    records every call, and raises injected errors via ``fail_on``.
    """

    def __init__(self) -> None:
        self.tables: dict[str, list[Row]] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_on: dict[tuple[str, str], Exception] = {}
        self.transactions = 0
        self.ready = True

    def seed(self, model: str, *rows: Row) -> None:
        self.tables.setdefault(model, []).extend(dict(r) for r in rows)

    def rows(self, model: str) -> list[Row]:
        return self.tables.get(model, [])

    def _record(self, op: str, model: str) -> None:
        self.calls.append((op, str(model)))
        error = self.fail_on.get((op, str(model)))
        if error is not None:
            raise error

    async def find_many(
        self,
        model: str,
        where: Sequence[Where] = (),
        *,
        limit: int | None = None,
        offset: int | None = None,
        sort_by: SortBy | None = None,
    ) -> list[Row]:
        self._record("find_many", model)
        rows = [dict(r) for r in self.rows(model) if matches(r, where)]
        if sort_by is not None:
            rows.sort(
                key=lambda r: (r.get(sort_by.field) is None, r.get(sort_by.field)),
                reverse=sort_by.direction == "desc",
            )
        start = offset or 0
        return rows[start : start + limit] if limit is not None else rows[start:]

    async def find_one(self, model: str, where: Sequence[Where]) -> Row | None:
        rows = await self.find_many(model, where, limit=1)
        return rows[0] if rows else None

    async def create(self, model: str, data: Row) -> Row:
        self._record("create", model)
        key_fields = _PRIMARY_KEYS.get(model, ("id",))
        key = tuple(data.get(f) for f in key_fields)
        for row in self.rows(model):
            if tuple(row.get(f) for f in key_fields) == key:
                raise DuplicateKeyError(f"duplicate key in {model}")
        self.tables.setdefault(model, []).append(dict(data))
        return dict(data)

    async def update(self, model: str, where: Sequence[Where], update: Row) -> Row | None:
        self._record("update", model)
        updated = None
        for row in self.rows(model):
            if matches(row, where):
                row.update(update)
                updated = dict(row)
        return updated

    async def delete(self, model: str, where: Sequence[Where]) -> None:
        await self.delete_many(model, where)

    async def delete_many(self, model: str, where: Sequence[Where]) -> int:
        self._record("delete_many", model)
        if not where:
            raise StoreError(f"refusing unfiltered delete on {model}")
        before = self.rows(model)
        kept = [r for r in before if not matches(r, where)]
        self.tables[model] = kept
        return len(before) - len(kept)

    async def count(self, model: str, where: Sequence[Where] = ()) -> int:
        self._record("count", model)
        return sum(1 for r in self.rows(model) if matches(r, where))

    async def ping(self) -> bool:
        return self.ready

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[FakeStoreAdapter]:
        # Fake operations never suspend, so restoring a snapshot is safe
        snapshot = copy.deepcopy(self.tables)
        self.transactions += 1
        try:
            yield self
        except BaseException:
            self.tables = snapshot
            raise


class NonTransactionalStore:
    """Wraps a FakeStoreAdapter without exposing ``transaction()``."""

    def __init__(self, inner: FakeStoreAdapter) -> None:
        self.inner = inner

    async def find_many(self, model, where=(), *, limit=None, offset=None, sort_by=None):
        return await self.inner.find_many(
            model, where, limit=limit, offset=offset, sort_by=sort_by
        )

    async def find_one(self, model, where):
        return await self.inner.find_one(model, where)

    async def create(self, model, data):
        return await self.inner.create(model, data)

    async def update(self, model, where, update):
        return await self.inner.update(model, where, update)

    async def delete(self, model, where):
        await self.inner.delete(model, where)

    async def delete_many(self, model, where):
        return await self.inner.delete_many(model, where)

    async def count(self, model, where=()):
        return await self.inner.count(model, where)


# --- Builders ---


def make_rule(
    rule_id: str = "r1",
    action: str | list[str] = "read",
    subject: str | list[str] | None = "Post",
    *,
    inverted: bool = False,
    source: PermissionSource = PermissionSource.USER_DIRECT,
    fields: list[str] | None = None,
    conditions: dict[str, Any] | None = None,
    reason: str = "",
    created_at: datetime | None = None,
    updated_at: datetime | None = None,
) -> Rule:
    """Rule with sensible defaults for tests."""
    return Rule(
        id=rule_id,
        name=f"rule {rule_id}",
        action=action,
        subject=subject,
        inverted=inverted,
        source=source,
        created_at=created_at or datetime(2025, 1, 1, tzinfo=UTC),
        fields=fields,
        conditions=conditions,
        reason=reason,
        updated_at=updated_at,
    )


def permission_row(permission_id: str, **overrides: Any) -> Row:
    """Stored permission row as the store returns it."""
    row: Row = {
        "id": permission_id,
        "name": f"permission {permission_id}",
        "action": "read",
        "subject": "Post",
        "inverted": False,
        "fields": None,
        "conditions": None,
        "reason": None,
        "organization_id": None,
        "created_at": datetime(2025, 1, 1, tzinfo=UTC),
        "updated_at": None,
        "expires_at": None,
    }
    row.update(overrides)
    return row


def permission_set_row(permission_set_id: str, **overrides: Any) -> Row:
    row: Row = {
        "id": permission_set_id,
        "name": f"set {permission_set_id}",
        "description": None,
        "organization_id": None,
        "created_at": datetime(2025, 1, 1, tzinfo=UTC),
        "updated_at": None,
    }
    row.update(overrides)
    return row


@pytest.fixture
def store() -> FakeStoreAdapter:
    return FakeStoreAdapter()
