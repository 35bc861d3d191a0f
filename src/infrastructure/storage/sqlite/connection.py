"""
Async SQLite connection pool with aiosqlite.

Provides connection management with proper async context handling.
Connections run in autocommit mode; write transactions are opened
explicitly with BEGIN IMMEDIATE so the database write lock is taken before
the first read of the transaction.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from src.config import get_logger, get_settings
from src.core.exceptions import (
    PersistenceError,
    TransactionConflictError,
    TransactionTimeoutError,
)

logger = get_logger(__name__)

_BUSY_MARKERS = ("database is locked", "database is busy", "database table is locked")


def is_busy_error(exc: BaseException) -> bool:
    """True if sqlite reported SQLITE_BUSY / SQLITE_LOCKED."""
    return isinstance(exc, aiosqlite.OperationalError) and any(
        marker in str(exc).lower() for marker in _BUSY_MARKERS
    )


class ConnectionPool:
    """
    Async SQLite connection pool.

    Manages a pool of connections with configurable size.
    """

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 5,
        busy_timeout: int = 30000,
    ):
        self.db_path = db_path
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout

        self._pool: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue(maxsize=pool_size)
        self._connections: list[aiosqlite.Connection] = []
        self._initialized = False
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Initialize the connection pool."""
        async with self._lock:
            if self._initialized:
                return

            # Ensure database directory exists
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            for _ in range(self.pool_size):
                conn = await self._create_connection()
                self._connections.append(conn)
                await self._pool.put(conn)

            self._initialized = True
            logger.info(
                "connection_pool_initialized",
                db_path=str(self.db_path),
                pool_size=self.pool_size,
            )

    async def _create_connection(self) -> aiosqlite.Connection:
        """Create a new database connection with optimized settings."""
        conn = await aiosqlite.connect(self.db_path, isolation_level=None)

        # WAL lets readers proceed while a sale holds the write lock
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA synchronous=NORMAL")
        await conn.execute(f"PRAGMA busy_timeout={self.busy_timeout}")
        await conn.execute("PRAGMA foreign_keys=ON")

        conn.row_factory = aiosqlite.Row

        return conn

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Acquire a connection from the pool.

        Waits at most `busy_timeout` ms for a free connection, then raises
        TransactionTimeoutError.

        Usage:
            async with pool.acquire() as conn:
                await conn.execute(...)
        """
        if not self._initialized:
            await self.initialize()

        timeout = self.busy_timeout / 1000
        try:
            conn = await asyncio.wait_for(self._pool.get(), timeout=timeout)
        except asyncio.TimeoutError as e:
            logger.warning("connection_pool_exhausted", pool_size=self.pool_size, timeout=timeout)
            raise TransactionTimeoutError("acquire", timeout) from e
        try:
            yield conn
        finally:
            await self._pool.put(conn)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Acquire a connection inside an immediate (write-locked) transaction.

        Commits on success, rolls back on exception. Lock and storage faults
        surface as TransactionTimeoutError, TransactionConflictError or
        PersistenceError; domain errors raised by the block pass through.
        """
        async with self.acquire() as conn:
            try:
                await conn.execute("BEGIN IMMEDIATE")
            except aiosqlite.Error as e:
                if is_busy_error(e):
                    raise TransactionTimeoutError("begin", self.busy_timeout / 1000) from e
                raise PersistenceError("begin", str(e)) from e

            try:
                yield conn
                await conn.commit()
            except asyncio.CancelledError:
                await self._rollback(conn)
                raise
            except Exception as e:
                await self._rollback(conn)
                if is_busy_error(e):
                    raise TransactionConflictError("transaction", str(e)) from e
                if isinstance(e, aiosqlite.Error):
                    raise PersistenceError("transaction", str(e)) from e
                raise

    async def _rollback(self, conn: aiosqlite.Connection) -> None:
        if not conn.in_transaction:
            return
        await conn.rollback()
        logger.info("transaction_rolled_back")

    async def close(self) -> None:
        """Close all connections in the pool."""
        async with self._lock:
            for conn in self._connections:
                await conn.close()
            self._connections.clear()
            self._pool = asyncio.Queue(maxsize=self.pool_size)
            self._initialized = False
            logger.info("connection_pool_closed")


# Global connection pool
_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Get or create the global connection pool."""
    global _pool
    if _pool is None:
        settings = get_settings()
        _pool = ConnectionPool(
            db_path=settings.storage.db_path,
            pool_size=settings.storage.pool_size,
            busy_timeout=settings.storage.busy_timeout,
        )
        await _pool.initialize()
    return _pool


async def close_pool() -> None:
    """Close the global connection pool."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
