"""
Record gateway: add / find / update / delete rows with plain dict input.

Each call acquires one pooled connection, runs one parameterized statement
built by `core.sql`, and releases the connection on every exit path.
Driver errors are re-raised as `core.errors` kinds.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Mapping, Sequence
from contextlib import asynccontextmanager
from typing import Any, TypeVar

import asyncpg

from . import sql
from .errors import GatewayError, NoMatchError, NoRowsReturnedError, translate_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _record_to_dict(record: asyncpg.Record | Mapping[str, Any]) -> dict[str, Any]:
    return dict(record)


class RecordGateway:
    def __init__(self, pool: asyncpg.Pool, *, acquire_timeout: float | None = None) -> None:
        self._pool = pool
        self._acquire_timeout = acquire_timeout

    @asynccontextmanager
    async def _connection(self, operation: str, table: str | None = None) -> AsyncIterator[Any]:
        """
        Hold one pooled connection for the body of the block.

        The pool's context manager releases it on every exit path; anything
        that is not already a gateway error is translated on the way out.
        """
        try:
            async with self._pool.acquire(timeout=self._acquire_timeout) as conn:
                yield conn
        except GatewayError:
            raise
        except Exception as exc:
            mapped = translate_error(exc)
            logger.warning(
                "db_error op=%s table=%s kind=%s sqlstate=%s",
                operation,
                table,
                type(mapped).__name__,
                mapped.sqlstate,
            )
            raise mapped from exc

    async def _fetch(self, conn: Any, operation: str, table: str, statement: sql.Statement) -> list[dict[str, Any]]:
        logger.debug("db_statement op=%s table=%s params=%s", operation, table, len(statement.args))
        rows = await conn.fetch(statement.sql, *statement.args)
        return [_record_to_dict(r) for r in rows]

    async def insert(self, table: str, fields: Mapping[str, Any], *, returning: str = "*") -> dict[str, Any]:
        """
        Insert one row and return it as persisted.
        """
        async with self._connection("insert", table) as conn:
            statement = sql.build_insert(table, fields, returning=returning)
            rows = await self._fetch(conn, "insert", table, statement)
            if not rows:
                raise NoRowsReturnedError("Insert operation failed - no record returned.")
            return rows[0]

    async def find(
        self,
        table: str,
        conditions: Mapping[str, Any] | None = None,
        *,
        columns: str | Sequence[str] = "*",
        order_by: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
        operator: str = "AND",
    ) -> list[dict[str, Any]]:
        """
        Select rows matching `conditions` (all rows when empty).

        `operator` joins the top-level conditions (AND / OR). An empty result
        is returned as-is.
        """
        options = sql.QueryOptions(
            columns=columns,
            order_by=order_by,
            limit=limit,
            offset=offset,
            operator=operator,
        )
        async with self._connection("find", table) as conn:
            statement = sql.build_select(table, conditions or {}, options)
            return await self._fetch(conn, "find", table, statement)

    async def update(
        self,
        table: str,
        fields: Mapping[str, Any],
        conditions: Mapping[str, Any],
        *,
        returning: str = "*",
    ) -> list[dict[str, Any]]:
        """
        Update rows matching `conditions` (AND-joined, required).

        Raises NoMatchError when nothing matched.
        """
        async with self._connection("update", table) as conn:
            statement = sql.build_update(table, fields, conditions, returning=returning)
            rows = await self._fetch(conn, "update", table, statement)
            if not rows:
                raise NoMatchError("No records found matching the update conditions.")
            return rows

    async def delete(
        self,
        table: str,
        conditions: Mapping[str, Any],
        *,
        returning: str = "*",
    ) -> list[dict[str, Any]]:
        """
        Delete rows matching `conditions` (AND-joined, required).

        Unlike update, zero deleted rows is not an error: the empty list is returned.
        """
        async with self._connection("delete", table) as conn:
            statement = sql.build_delete(table, conditions, returning=returning)
            return await self._fetch(conn, "delete", table, statement)

    async def run_in_transaction(self, operations: Callable[[Any], Awaitable[T]]) -> T:
        """
        Run `operations(conn)` inside one transaction on one held connection.

        Commits when `operations` returns, rolls back when it raises.
        """
        async with self._connection("transaction") as conn:
            async with conn.transaction():
                return await operations(conn)

    async def test_connection(self) -> dict[str, Any]:
        """
        Connectivity diagnostics. Never raises.
        """
        try:
            async with self._pool.acquire(timeout=self._acquire_timeout) as conn:
                row = await conn.fetchrow("SELECT now() AS current_time, version() AS version")
        except Exception as exc:
            return {"connected": False, "error": str(exc) or type(exc).__name__}

        return {
            "connected": True,
            "current_time": row["current_time"] if row is not None else None,
            "version": row["version"] if row is not None else None,
            "pool_stats": {
                "size": self._pool.get_size(),
                "idle": self._pool.get_idle_size(),
                "max_size": self._pool.get_max_size(),
            },
        }

    async def close_connection(self) -> None:
        """
        Drain and close the pool. Safe to call more than once; logs instead of raising.
        """
        if self._pool.is_closing():
            return None
        try:
            await self._pool.close()
            logger.info("db_pool_closed")
        except Exception as exc:
            logger.error("db_pool_close_failed error=%s", exc)
