"""Store adapter port - generic access to named relations."""

from collections.abc import Sequence
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Any, Literal, Protocol, runtime_checkable

Operator = Literal["eq", "ne", "in", "contains", "gt", "gte", "lt", "lte"]
Connector = Literal["AND", "OR"]
Row = dict[str, Any]


@dataclass(frozen=True)
class Where:
    """One filter predicate.

    All AND predicates are conjoined; all OR predicates form one disjunction
    that is conjoined with the rest. ``eq``/``ne`` against ``None`` test for NULL.
    """

    field: str
    value: Any
    operator: Operator = "eq"
    connector: Connector = "AND"


@dataclass(frozen=True)
class SortBy:
    """Ordering for find_many."""

    field: str
    direction: Literal["asc", "desc"] = "asc"


class StoreError(Exception):
    """Any failure raised by a store adapter."""


class DuplicateKeyError(StoreError):
    """Unique or primary key constraint rejected an insert/update."""


class ConstraintViolationError(StoreError):
    """Non-unique integrity constraint (foreign key, not null, check) failed."""


class StoreAdapter(Protocol):
    """Port for CRUD over named relations."""

    async def find_many(
        self,
        model: str,
        where: Sequence[Where] = (),
        *,
        limit: int | None = None,
        offset: int | None = None,
        sort_by: SortBy | None = None,
    ) -> list[Row]: ...

    async def find_one(self, model: str, where: Sequence[Where]) -> Row | None: ...

    async def create(self, model: str, data: Row) -> Row: ...

    async def update(self, model: str, where: Sequence[Where], update: Row) -> Row | None: ...

    async def delete(self, model: str, where: Sequence[Where]) -> None: ...

    async def delete_many(self, model: str, where: Sequence[Where]) -> int: ...

    async def count(self, model: str, where: Sequence[Where] = ()) -> int: ...


@runtime_checkable
class TransactionalStoreAdapter(StoreAdapter, Protocol):
    """Store adapter that can scope a block of operations to one transaction.

    Entering ``transaction()`` yields an adapter bound to the transaction;
    leaving it with an exception rolls everything back. Nested use maps to a
    savepoint where the store supports it.
    """

    def transaction(self) -> AbstractAsyncContextManager["StoreAdapter"]: ...


def supports_transactions(store: StoreAdapter) -> bool:
    return isinstance(store, TransactionalStoreAdapter)


def is_duplicate_key_error(error: BaseException) -> bool:
    """True for unique-constraint failures, including unwrapped foreign ones."""
    if isinstance(error, DuplicateKeyError):
        return True
    if isinstance(error, ConstraintViolationError):
        return False
    message = str(error).lower()
    return any(
        marker in message
        for marker in ("duplicate", "unique", "already exists")
    )
