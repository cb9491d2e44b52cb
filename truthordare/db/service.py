"""Backend-agnostic data access service.

`DatabaseService` runs each operation on a connection borrowed from the pool.
`TransactionHandle` exposes the same operations bound to the single
connection of an open transaction. Both share `DatabaseOperations`; only the
executor they are built with differs.

Usage:
    db = create_database_service(get_settings().db)
    await db.test_connection()

    user = await db.get("users", {"id": 1})

    async def move(tx):
        await tx.update("accounts", {"balance": 0}, {"id": 1})
        return await tx.insert("ledger", {"account_id": 1, "amount": -10})

    result = await db.transaction(move)
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Iterator, List, Mapping, Optional, Sequence, TypeVar

from truthordare.config import DatabaseSettings

from .backends import Backend, get_backend
from .connection import ConnectionPool
from .exceptions import (
    DatabaseConnectionError,
    DatabaseError,
    NestedTransactionError,
    QueryError,
    TransactionError,
)
from .executor import ConnectionExecutor, Executor, PoolExecutor
from .models import MutationResult, QueryOptions, Record
from .query_builder import QueryBuilder, Statement, describe_container

logger = logging.getLogger(__name__)

T = TypeVar("T")


def error_message(error: BaseException) -> str:
    """Return the message of *error*, falling back to its type name."""
    return str(error) or error.__class__.__name__


@contextmanager
def _reraise(prefix: str) -> Iterator[None]:
    """Wrap driver errors in QueryError, keeping the original message."""
    try:
        yield
    except DatabaseError:
        raise
    except Exception as e:
        raise QueryError(f"{prefix}: {error_message(e)}") from e


class DatabaseOperations:
    """CRUD operations and raw SQL escape hatches."""

    def __init__(self, executor: Executor, default_schema: Optional[str] = None) -> None:
        self._executor = executor
        self._builder = QueryBuilder(executor.backend.dialect)
        self.default_schema = default_schema

    @property
    def backend(self) -> Backend:
        return self._executor.backend

    def _schema(self, schema: Optional[str]) -> Optional[str]:
        return schema if schema is not None else self.default_schema

    async def get(
        self,
        table: str,
        conditions: Mapping[str, Any],
        options: Optional[QueryOptions] = None,
        *,
        schema: Optional[str] = None,
    ) -> Optional[Record]:
        """Return the first record matching *conditions*, or None."""
        schema = self._schema(schema)
        statement = self._builder.select_one(table, conditions, options, schema=schema)
        with _reraise(f"Failed to get record from {describe_container(table, schema)}"):
            rows = await self._executor.fetch(statement)
        return rows[0] if rows else None

    async def list(
        self,
        table: str,
        conditions: Optional[Mapping[str, Any]] = None,
        options: Optional[QueryOptions] = None,
        *,
        schema: Optional[str] = None,
    ) -> List[Record]:
        """Return every record matching *conditions* (all records when omitted)."""
        schema = self._schema(schema)
        statement = self._builder.select(table, conditions, options, schema=schema)
        with _reraise(f"Failed to list records from {describe_container(table, schema)}"):
            return await self._executor.fetch(statement)

    async def count(
        self,
        table: str,
        conditions: Optional[Mapping[str, Any]] = None,
        *,
        schema: Optional[str] = None,
    ) -> int:
        schema = self._schema(schema)
        statement = self._builder.count(table, conditions, schema=schema)
        with _reraise(f"Failed to count records in {describe_container(table, schema)}"):
            rows = await self._executor.fetch(statement)
            # Some drivers report COUNT(*) as text.
            return int(rows[0]["count"]) if rows else 0

    async def insert(self, table: str, data: Mapping[str, Any], *, schema: Optional[str] = None) -> MutationResult:
        """Insert one record. The written row is returned in ``result.rows``."""
        schema = self._schema(schema)
        statement = self._builder.insert(table, data, schema=schema)
        with _reraise(f"Failed to insert record into {describe_container(table, schema)}"):
            return await self._executor.insert(statement)

    async def update(
        self,
        table: str,
        data: Mapping[str, Any],
        conditions: Mapping[str, Any],
        *,
        schema: Optional[str] = None,
    ) -> MutationResult:
        schema = self._schema(schema)
        statement = self._builder.update(table, data, conditions, schema=schema)
        with _reraise(f"Failed to update records in {describe_container(table, schema)}"):
            return await self._executor.execute(statement)

    async def delete(
        self,
        table: str,
        conditions: Mapping[str, Any],
        *,
        schema: Optional[str] = None,
    ) -> MutationResult:
        schema = self._schema(schema)
        statement = self._builder.delete(table, conditions, schema=schema)
        with _reraise(f"Failed to delete records from {describe_container(table, schema)}"):
            return await self._executor.execute(statement)

    async def query(self, sql: str, params: Sequence[Any] = ()) -> List[Record]:
        """Run hand-written SQL and return its rows. Placeholders follow the backend dialect."""
        with _reraise("Query execution failed"):
            return await self._executor.fetch(Statement(sql, list(params)))

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> MutationResult:
        """Run a hand-written statement that returns no rows."""
        with _reraise("Execute operation failed"):
            return await self._executor.execute(Statement(sql, list(params)))


class TransactionHandle(DatabaseOperations):
    """Operations bound to the connection of one open transaction."""

    _executor: ConnectionExecutor

    @property
    def active(self) -> bool:
        return self._executor.active

    def atomic(self) -> Any:
        raise NestedTransactionError("Nested transactions are not supported")

    async def transaction(self, callback: Callable[["TransactionHandle"], Awaitable[T]]) -> T:
        raise NestedTransactionError("Nested transactions are not supported")


class DatabaseService(DatabaseOperations):
    """Pool-backed operations plus transactions and pool lifecycle."""

    def __init__(self, backend: Backend, pool: ConnectionPool, default_schema: Optional[str] = None) -> None:
        super().__init__(PoolExecutor(backend, pool), default_schema=default_schema)
        self.pool = pool

    async def __aenter__(self) -> "DatabaseService":
        await self.open()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def open(self) -> None:
        """Open the pool now instead of on first use."""
        await self.pool.open()

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[TransactionHandle]:
        """
        Run the enclosed block in one transaction.

        Usage:
            async with db.atomic() as tx:
                await tx.insert("questions", {...})

        Commits when the block exits normally. Any exception rolls the
        transaction back and is re-raised as TransactionError.
        """
        conn = await self.pool.acquire()
        executor = ConnectionExecutor(self.backend, conn)
        try:
            try:
                await self.backend.begin(conn)
                yield TransactionHandle(executor, default_schema=self.default_schema)
                await self.backend.commit(conn)
            except Exception as e:
                await self._rollback(conn)
                raise TransactionError(f"Transaction failed: {error_message(e)}") from e
            except BaseException:
                await self._rollback(conn)
                raise
        finally:
            executor.deactivate()
            await self.pool.release(conn)

    async def transaction(self, callback: Callable[[TransactionHandle], Awaitable[T]]) -> T:
        """Await ``callback(handle)`` inside a transaction and return its result."""
        async with self.atomic() as tx:
            return await callback(tx)

    async def _rollback(self, conn: Any) -> None:
        try:
            await self.backend.rollback(conn)
        except Exception as e:
            logger.warning("Rollback failed: %s", error_message(e))

    async def test_connection(self) -> bool:
        """Run ``SELECT 1`` on a pooled connection; used to fail fast at startup."""
        try:
            async with self.pool.connection() as conn:
                await self.backend.fetch(conn, Statement("SELECT 1"))
        except Exception as e:
            raise DatabaseConnectionError(f"Database connection test failed: {error_message(e)}") from e
        return True

    async def close(self) -> None:
        """Close the connection pool. Call this when shutting down the application."""
        try:
            await self.pool.close()
        except Exception as e:
            raise DatabaseError(f"Failed to close database pool: {error_message(e)}") from e


def create_database_service(settings: DatabaseSettings) -> DatabaseService:
    """Build a service for the backend named in *settings*. The pool opens lazily."""
    backend = get_backend(settings)
    return DatabaseService(backend, backend.create_pool(settings), default_schema=settings.default_schema)
