"""PostgreSQL store adapter - generic CRUD over named relations."""

import asyncio
import logging
from collections.abc import AsyncIterator, Iterator, Sequence
from contextlib import asynccontextmanager, contextmanager
from typing import Any

import psycopg
from psycopg import AsyncConnection, errors, sql
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from permset.application.ports.store_adapter import (
    ConstraintViolationError,
    DuplicateKeyError,
    Row,
    SortBy,
    StoreError,
    Where,
)

logger = logging.getLogger(__name__)

_COMPARISONS = {
    "eq": "=",
    "ne": "<>",
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
}


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _predicate(clause: Where) -> tuple[sql.Composable, list[Any]]:
    column = sql.Identifier(clause.field)
    if clause.operator == "in":
        values = list(clause.value or [])
        if not values:
            return sql.SQL("FALSE"), []
        return sql.SQL("{} = ANY(%s)").format(column), [values]
    if clause.operator == "contains":
        return (
            sql.SQL("{} LIKE %s").format(column),
            [f"%{_escape_like(str(clause.value))}%"],
        )
    if clause.operator not in _COMPARISONS:
        raise ValueError(f"Unsupported operator: {clause.operator}")
    if clause.value is None:
        if clause.operator == "eq":
            return sql.SQL("{} IS NULL").format(column), []
        if clause.operator == "ne":
            return sql.SQL("{} IS NOT NULL").format(column), []
        raise ValueError(f"Operator {clause.operator} cannot compare against NULL")
    op = sql.SQL(_COMPARISONS[clause.operator])
    return sql.SQL("{} {} %s").format(column, op), [clause.value]


def build_where(where: Sequence[Where]) -> tuple[sql.Composable, list[Any]]:
    """Render predicates as a WHERE clause.

    AND predicates are joined with AND; OR predicates form one parenthesised
    disjunction which is ANDed with the rest.
    """
    if not where:
        return sql.SQL(""), []
    conjuncts: list[sql.Composable] = []
    disjuncts: list[sql.Composable] = []
    conj_params: list[Any] = []
    disj_params: list[Any] = []
    for clause in where:
        predicate, params = _predicate(clause)
        if clause.connector == "OR":
            disjuncts.append(predicate)
            disj_params.extend(params)
        else:
            conjuncts.append(predicate)
            conj_params.extend(params)
    if disjuncts:
        conjuncts.append(
            sql.SQL("({})").format(sql.SQL(" OR ").join(disjuncts))
        )
    return (
        sql.SQL(" WHERE ") + sql.SQL(" AND ").join(conjuncts),
        conj_params + disj_params,
    )


@contextmanager
def _translate_errors(model: str) -> Iterator[None]:
    try:
        yield
    except errors.UniqueViolation as e:
        raise DuplicateKeyError(f"duplicate key in {model}") from e
    except psycopg.IntegrityError as e:
        raise ConstraintViolationError(f"constraint violation in {model}") from e
    except psycopg.Error as e:
        logger.error("Store operation on %s failed: %s", model, e)
        raise StoreError(f"store operation on {model} failed") from e


class PostgresConnectionStore:
    """Store adapter bound to one connection.

    ``transaction()`` opens a transaction, or a savepoint when one is already
    open. Transaction blocks from different tasks sharing this connection run
    one at a time; nesting within a task is allowed.
    """

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn
        self._tx_lock = asyncio.Lock()
        self._tx_owner: asyncio.Task | None = None

    async def _fetch(self, model: str, query: sql.Composable, params: list[Any]) -> list[Row]:
        with _translate_errors(model):
            async with self._conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(query, params)
                if cur.description is None:
                    return []
                return await cur.fetchall()

    async def _execute(self, model: str, query: sql.Composable, params: list[Any]) -> int:
        with _translate_errors(model):
            async with self._conn.cursor() as cur:
                await cur.execute(query, params)
                return cur.rowcount

    async def find_many(
        self,
        model: str,
        where: Sequence[Where] = (),
        *,
        limit: int | None = None,
        offset: int | None = None,
        sort_by: SortBy | None = None,
    ) -> list[Row]:
        clause, params = build_where(where)
        query = sql.SQL("SELECT * FROM {}").format(sql.Identifier(model)) + clause
        if sort_by is not None:
            direction = sql.SQL("DESC" if sort_by.direction == "desc" else "ASC")
            query += sql.SQL(" ORDER BY {} {}").format(sql.Identifier(sort_by.field), direction)
        if limit is not None:
            query += sql.SQL(" LIMIT %s")
            params.append(limit)
        if offset:
            query += sql.SQL(" OFFSET %s")
            params.append(offset)
        return await self._fetch(model, query, params)

    async def find_one(self, model: str, where: Sequence[Where]) -> Row | None:
        rows = await self.find_many(model, where, limit=1)
        return rows[0] if rows else None

    async def create(self, model: str, data: Row) -> Row:
        columns = list(data)
        query = sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING *").format(
            sql.Identifier(model),
            sql.SQL(", ").join(sql.Identifier(c) for c in columns),
            sql.SQL(", ").join(sql.Placeholder() for _ in columns),
        )
        rows = await self._fetch(model, query, [data[c] for c in columns])
        return rows[0]

    async def update(self, model: str, where: Sequence[Where], update: Row) -> Row | None:
        if not where:
            raise StoreError(f"refusing unfiltered update on {model}")
        if not update:
            return await self.find_one(model, where)
        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(c)) for c in update
        )
        clause, params = build_where(where)
        query = (
            sql.SQL("UPDATE {} SET ").format(sql.Identifier(model))
            + assignments
            + clause
            + sql.SQL(" RETURNING *")
        )
        rows = await self._fetch(model, query, list(update.values()) + params)
        return rows[0] if rows else None

    async def delete(self, model: str, where: Sequence[Where]) -> None:
        await self.delete_many(model, where)

    async def delete_many(self, model: str, where: Sequence[Where]) -> int:
        if not where:
            raise StoreError(f"refusing unfiltered delete on {model}")
        clause, params = build_where(where)
        query = sql.SQL("DELETE FROM {}").format(sql.Identifier(model)) + clause
        return await self._execute(model, query, params)

    async def count(self, model: str, where: Sequence[Where] = ()) -> int:
        clause, params = build_where(where)
        query = sql.SQL("SELECT count(*) AS n FROM {}").format(sql.Identifier(model)) + clause
        rows = await self._fetch(model, query, params)
        return int(rows[0]["n"]) if rows else 0

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["PostgresConnectionStore"]:
        task = asyncio.current_task()
        if self._tx_owner is task:
            async with self._conn.transaction():
                yield self
            return
        async with self._tx_lock:
            self._tx_owner = task
            try:
                async with self._conn.transaction():
                    yield self
            finally:
                self._tx_owner = None


class PostgresStoreAdapter:
    """Store adapter over a pool; each operation borrows its own connection."""

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool

    @asynccontextmanager
    async def _store(self) -> AsyncIterator[PostgresConnectionStore]:
        async with self._pool.connection() as conn:
            yield PostgresConnectionStore(conn)

    async def find_many(
        self,
        model: str,
        where: Sequence[Where] = (),
        *,
        limit: int | None = None,
        offset: int | None = None,
        sort_by: SortBy | None = None,
    ) -> list[Row]:
        async with self._store() as store:
            return await store.find_many(
                model, where, limit=limit, offset=offset, sort_by=sort_by
            )

    async def find_one(self, model: str, where: Sequence[Where]) -> Row | None:
        async with self._store() as store:
            return await store.find_one(model, where)

    async def create(self, model: str, data: Row) -> Row:
        async with self._store() as store:
            return await store.create(model, data)

    async def update(self, model: str, where: Sequence[Where], update: Row) -> Row | None:
        async with self._store() as store:
            return await store.update(model, where, update)

    async def delete(self, model: str, where: Sequence[Where]) -> None:
        async with self._store() as store:
            await store.delete(model, where)

    async def delete_many(self, model: str, where: Sequence[Where]) -> int:
        async with self._store() as store:
            return await store.delete_many(model, where)

    async def count(self, model: str, where: Sequence[Where] = ()) -> int:
        async with self._store() as store:
            return await store.count(model, where)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[PostgresConnectionStore]:
        """Borrow one connection and run the block in a single transaction."""
        async with self._store() as store:
            async with store.transaction() as tx:
                yield tx

    async def ping(self) -> bool:
        """Readiness probe."""
        try:
            async with self._pool.connection() as conn:
                await conn.execute("SELECT 1")
            return True
        except psycopg.Error as e:
            logger.warning("Database not ready: %s", e)
            return False
