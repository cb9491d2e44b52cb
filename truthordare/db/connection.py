"""Async connection pools for SQLite and PostgreSQL.

`SQLitePool` keeps `aiosqlite` connections in an `asyncio.Queue`;
`PostgresPool` delegates to an `asyncpg` pool. Both share the waiting,
backpressure and bookkeeping rules implemented in `ConnectionPool`.
"""

from __future__ import annotations

import abc
import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import aiosqlite
import asyncpg

from .exceptions import DatabaseConnectionError, PoolExhaustedError

logger = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"


class ConnectionPool(abc.ABC):
    """Bounded pool of physical connections to one database."""

    def __init__(
        self,
        size: int = 10,
        timeout: float = 30.0,
        queue_limit: int = 0,
        wait_for_connections: bool = True,
    ) -> None:
        if size < 1:
            raise ValueError("Pool size must be at least 1")
        self._size = size
        self._timeout = timeout
        self._queue_limit = queue_limit
        self._wait_for_connections = wait_for_connections
        self._in_use = 0
        self._waiting = 0
        self._opened = False
        self._closed = False
        self._lock = asyncio.Lock()

    @property
    def size(self) -> int:
        return self._size

    @property
    def in_use(self) -> int:
        return self._in_use

    @property
    def available(self) -> int:
        """Connections that can be handed out without waiting."""
        return self._size - self._in_use

    @property
    def waiting(self) -> int:
        return self._waiting

    @property
    def closed(self) -> bool:
        return self._closed

    @abc.abstractmethod
    async def _open(self) -> None:
        """Create the physical connections."""

    @abc.abstractmethod
    async def _get(self, timeout: float) -> Any:
        """Wait up to *timeout* seconds for a connection."""

    @abc.abstractmethod
    async def _put(self, conn: Any) -> None:
        """Give a connection back."""

    @abc.abstractmethod
    async def _close(self) -> None:
        """Close every idle connection."""

    async def open(self) -> None:
        """Open the pool. Safe to call multiple times."""
        if self._opened:
            return
        async with self._lock:
            if self._closed:
                raise DatabaseConnectionError("Connection pool is closed")
            if not self._opened:
                logger.info("Initializing database connection pool")
                try:
                    await self._open()
                except Exception as e:
                    raise DatabaseConnectionError(
                        f"Failed to open database connection pool: {str(e) or e.__class__.__name__}"
                    ) from e
                self._opened = True

    async def acquire(self) -> Any:
        """
        Borrow a connection, waiting for one to be released if necessary.

        Raises PoolExhaustedError when the wait would exceed the queue limit,
        when waiting is disabled, or when no connection frees up in time.
        """
        if self._closed:
            raise DatabaseConnectionError("Connection pool is closed")
        await self.open()

        # Waiters keep their place until their handoff completes, so a
        # connection released to a woken waiter is not free for newcomers.
        if self.available - self._waiting <= 0:
            if not self._wait_for_connections:
                raise PoolExhaustedError("No database connection available")
            if self._queue_limit and self._waiting >= self._queue_limit:
                raise PoolExhaustedError(
                    f"Connection wait queue limit reached ({self._queue_limit})"
                )

        self._waiting += 1
        try:
            conn = await self._get(self._timeout)
        except asyncio.TimeoutError as e:
            logger.error("Timed out waiting for database connection")
            raise PoolExhaustedError("Timed out waiting for database connection") from e
        finally:
            self._waiting -= 1

        self._in_use += 1
        logger.debug("Acquired database connection from pool (%d/%d in use)", self._in_use, self._size)
        return conn

    async def release(self, conn: Any) -> None:
        """Return a borrowed connection to the pool."""
        self._in_use -= 1
        await self._put(conn)
        logger.debug("Returned database connection to pool")

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[Any]:
        """
        Acquire a connection for the duration of the block.

        Usage:
            async with pool.connection() as conn:
                ...
        """
        conn = await self.acquire()
        start_time = time.monotonic()
        try:
            yield conn
        finally:
            logger.debug("Database connection held for %.3f seconds", time.monotonic() - start_time)
            await self.release(conn)

    async def close(self) -> None:
        """Close all connections and refuse further acquires."""
        async with self._lock:
            if self._closed:
                return
            self._closed = True
            if self._opened:
                await self._close()
        logger.info("Database connection pool closed")


class SQLitePool(ConnectionPool):
    """Pool of `aiosqlite` connections to one database file."""

    def __init__(self, path: str, **kwargs: Any) -> None:
        # Every ":memory:" connection is a separate empty database, so an
        # in-memory pool holds exactly one shared connection.
        if path == MEMORY_DATABASE:
            kwargs["size"] = 1
        super().__init__(**kwargs)
        self.path = path
        self._queue: Optional[asyncio.Queue[aiosqlite.Connection]] = None

    async def _connect(self) -> aiosqlite.Connection:
        # isolation_level=None keeps the connection in autocommit mode so
        # transactions are only opened by an explicit BEGIN.
        conn = await aiosqlite.connect(
            self.path,
            timeout=self._timeout,
            isolation_level=None,
            cached_statements=128,
        )
        conn.row_factory = aiosqlite.Row
        await conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    async def _open(self) -> None:
        queue: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue(maxsize=self._size)
        for i in range(self._size):
            try:
                conn = await self._connect()
            except Exception as e:
                logger.error("Error opening database connection [%d]: %s", i + 1, e)
                while not queue.empty():
                    await queue.get_nowait().close()
                raise
            queue.put_nowait(conn)
            logger.debug("Opened connection %d/%d", i + 1, self._size)
        self._queue = queue
        logger.info("Database connection pool initialized with size %d", self._size)

    async def _get(self, timeout: float) -> aiosqlite.Connection:
        if self._queue is None:
            raise DatabaseConnectionError("Connection pool is not initialized")
        return await asyncio.wait_for(self._queue.get(), timeout=timeout)

    async def _put(self, conn: aiosqlite.Connection) -> None:
        if self._closed or self._queue is None:
            await conn.close()
            return
        self._queue.put_nowait(conn)

    async def _close(self) -> None:
        if self._queue is None:
            return
        while not self._queue.empty():
            conn = self._queue.get_nowait()
            try:
                await conn.close()
            except Exception as exc:  # pragma: no cover - cleanup best effort
                logger.warning("Error closing DB connection: %s", exc)
        self._queue = None


class PostgresPool(ConnectionPool):
    """Wrapper around an `asyncpg` pool."""

    def __init__(
        self,
        *,
        host: str,
        port: Optional[int],
        user: str,
        password: str,
        database: str,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._connect_kwargs = {
            "host": host,
            "port": port,
            "user": user,
            "password": password,
            "database": database,
        }
        self._pool: Optional[asyncpg.Pool] = None

    async def _open(self) -> None:
        self._pool = await asyncpg.create_pool(
            min_size=1,
            max_size=self._size,
            **self._connect_kwargs,
        )
        logger.info("Database connection pool initialized with size %d", self._size)

    async def _get(self, timeout: float) -> asyncpg.Connection:
        if self._pool is None:
            raise DatabaseConnectionError("Connection pool is not initialized")
        return await self._pool.acquire(timeout=timeout)

    async def _put(self, conn: asyncpg.Connection) -> None:
        if self._pool is None:
            return
        await self._pool.release(conn)

    async def _close(self) -> None:
        if self._pool is None:
            return
        await self._pool.close()
        self._pool = None
