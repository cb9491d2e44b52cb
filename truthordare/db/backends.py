"""Driver adapters.

A backend pairs a dialect with the driver calls needed to run a `Statement`
on one connection and to translate driver results into plain records and
`MutationResult` objects. Pools are created from `DatabaseSettings` here too,
so the backend is chosen exactly once, when the service is built.
"""

from __future__ import annotations

import abc
from typing import Any, List

from truthordare.config import DatabaseSettings

from .connection import ConnectionPool, PostgresPool, SQLitePool
from .dialects import Dialect, PostgresDialect, SQLiteDialect
from .models import MutationResult, Record
from .query_builder import Statement


class Backend(abc.ABC):
    """Runs statements for one SQL dialect on a borrowed connection."""

    dialect: Dialect

    def __init__(self, primary_key: str = "id") -> None:
        self.primary_key = primary_key

    @property
    def name(self) -> str:
        return self.dialect.name

    @abc.abstractmethod
    def create_pool(self, settings: DatabaseSettings) -> ConnectionPool:
        """Build (but do not open) a pool for *settings*."""

    @abc.abstractmethod
    async def fetch(self, conn: Any, statement: Statement) -> List[Record]:
        """Run a row-returning statement."""

    @abc.abstractmethod
    async def execute(self, conn: Any, statement: Statement) -> MutationResult:
        """Run a statement that returns no rows."""

    @abc.abstractmethod
    async def insert(self, conn: Any, statement: Statement) -> MutationResult:
        """Run an INSERT built by the query builder and report the new row."""

    async def begin(self, conn: Any) -> None:
        await self._command(conn, "BEGIN")

    async def commit(self, conn: Any) -> None:
        await self._command(conn, "COMMIT")

    async def rollback(self, conn: Any) -> None:
        await self._command(conn, "ROLLBACK")

    async def _command(self, conn: Any, sql: str) -> None:
        await conn.execute(sql)


def _pool_options(settings: DatabaseSettings) -> dict:
    return {
        "size": settings.pool_size,
        "timeout": settings.pool_timeout,
        "queue_limit": settings.queue_limit,
        "wait_for_connections": settings.wait_for_connections,
    }


class SQLiteBackend(Backend):
    """`aiosqlite` backend. Generated keys are reported by the driver."""

    dialect = SQLiteDialect()

    def create_pool(self, settings: DatabaseSettings) -> SQLitePool:
        return SQLitePool(settings.path, **_pool_options(settings))

    async def fetch(self, conn, statement):
        cursor = await conn.execute(statement.sql, statement.params)
        try:
            rows = await cursor.fetchall()
        finally:
            await cursor.close()
        return [dict(row) for row in rows]

    async def execute(self, conn, statement):
        cursor = await conn.execute(statement.sql, statement.params)
        affected = max(cursor.rowcount, 0)
        await cursor.close()
        return MutationResult(affected_rows=affected)

    async def insert(self, conn, statement):
        cursor = await conn.execute(statement.sql, statement.params)
        result = MutationResult(affected_rows=max(cursor.rowcount, 0), insert_id=cursor.lastrowid or None)
        await cursor.close()
        if result.insert_id is not None and statement.container:
            result.rows = await self.fetch(
                conn,
                Statement(f"SELECT * FROM {statement.container} WHERE rowid = ?", [result.insert_id]),
            )
        return result


def _status_count(status: str) -> int:
    """Extract the row count from an asyncpg command tag like ``UPDATE 3``."""
    parts = (status or "").split()
    if parts and parts[-1].isdigit():
        return int(parts[-1])
    return 0


class PostgresBackend(Backend):
    """`asyncpg` backend. Generated keys come from ``RETURNING *``."""

    dialect = PostgresDialect()

    def create_pool(self, settings: DatabaseSettings) -> PostgresPool:
        return PostgresPool(
            host=settings.host,
            port=settings.resolved_port,
            user=settings.user,
            password=settings.password.get_secret_value(),
            database=settings.name,
            **_pool_options(settings),
        )

    async def fetch(self, conn, statement):
        rows = await conn.fetch(statement.sql, *statement.params)
        return [dict(row) for row in rows]

    async def execute(self, conn, statement):
        status = await conn.execute(statement.sql, *statement.params)
        return MutationResult(affected_rows=_status_count(status))

    async def insert(self, conn, statement):
        rows = await self.fetch(conn, statement)
        insert_id = None
        if rows:
            key = rows[0].get(self.primary_key)
            # Non-numeric keys (uuid, text) are not reported.
            if isinstance(key, int) and not isinstance(key, bool):
                insert_id = key
        return MutationResult(affected_rows=len(rows), insert_id=insert_id, rows=rows)


BACKENDS = {
    "sqlite": SQLiteBackend,
    "postgres": PostgresBackend,
}


def get_backend(settings: DatabaseSettings) -> Backend:
    """Return the backend implementation selected by *settings*."""
    try:
        backend_cls = BACKENDS[settings.backend]
    except KeyError:
        raise ValueError(f"Unsupported database backend: {settings.backend}") from None
    return backend_cls(primary_key=settings.primary_key)
