"""Where statements run: on a pooled connection or on one fixed connection."""

from __future__ import annotations

import abc
from typing import Any, List, Optional

from .backends import Backend
from .connection import ConnectionPool
from .exceptions import TransactionError
from .models import MutationResult, Record
from .query_builder import Statement


class Executor(abc.ABC):
    """Runs statements through a backend."""

    def __init__(self, backend: Backend) -> None:
        self.backend = backend

    @abc.abstractmethod
    async def fetch(self, statement: Statement) -> List[Record]:
        ...

    @abc.abstractmethod
    async def execute(self, statement: Statement) -> MutationResult:
        ...

    @abc.abstractmethod
    async def insert(self, statement: Statement) -> MutationResult:
        ...


class PoolExecutor(Executor):
    """Borrows a connection from the pool for each statement."""

    def __init__(self, backend: Backend, pool: ConnectionPool) -> None:
        super().__init__(backend)
        self.pool = pool

    async def fetch(self, statement):
        async with self.pool.connection() as conn:
            return await self.backend.fetch(conn, statement)

    async def execute(self, statement):
        async with self.pool.connection() as conn:
            return await self.backend.execute(conn, statement)

    async def insert(self, statement):
        async with self.pool.connection() as conn:
            return await self.backend.insert(conn, statement)


class ConnectionExecutor(Executor):
    """Runs every statement on one borrowed connection until deactivated."""

    def __init__(self, backend: Backend, conn: Any) -> None:
        super().__init__(backend)
        self._conn: Optional[Any] = conn

    @property
    def active(self) -> bool:
        return self._conn is not None

    def deactivate(self) -> None:
        self._conn = None

    def _connection(self) -> Any:
        if self._conn is None:
            raise TransactionError("Transaction handle is no longer active")
        return self._conn

    async def fetch(self, statement):
        return await self.backend.fetch(self._connection(), statement)

    async def execute(self, statement):
        return await self.backend.execute(self._connection(), statement)

    async def insert(self, statement):
        return await self.backend.insert(self._connection(), statement)
