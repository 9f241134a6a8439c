"""
Async SQLite connection pool on aiosqlite.

Each pooled connection runs in WAL mode with a busy timeout, so
concurrent ledger writers queue on the write lock instead of failing.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path

import aiosqlite

from stockledger.config import get_logger, get_settings

logger = get_logger(__name__)


def format_timestamp(value: datetime | None) -> str | None:
    """Fixed-width ISO timestamp so string order matches time order."""
    if value is None:
        return None
    return value.isoformat(timespec="microseconds")


def parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except (ValueError, TypeError):
        return None


class ConnectionPool:
    """Fixed-size pool of aiosqlite connections to one database file."""

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 5,
        busy_timeout: int = 30000,
    ):
        self.db_path = Path(db_path)
        self.pool_size = max(1, pool_size)
        self.busy_timeout = busy_timeout

        self._idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue(maxsize=self.pool_size)
        self._connections: list[aiosqlite.Connection] = []
        self._initialized = False
        self._lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Open all pooled connections. Safe to call more than once."""
        async with self._lock:
            if self._initialized:
                return

            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            for _ in range(self.pool_size):
                conn = await self._open()
                self._connections.append(conn)
                await self._idle.put(conn)

            self._initialized = True
            logger.info(
                "connection_pool_initialized",
                db_path=str(self.db_path),
                pool_size=self.pool_size,
                busy_timeout=self.busy_timeout,
            )

    async def _open(self) -> aiosqlite.Connection:
        conn = await aiosqlite.connect(self.db_path)
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA synchronous=NORMAL")
        await conn.execute(f"PRAGMA busy_timeout={int(self.busy_timeout)}")
        await conn.execute("PRAGMA foreign_keys=ON")
        conn.row_factory = aiosqlite.Row
        return conn

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Borrow a connection for reads.

        Usage:
            async with pool.acquire() as conn:
                cursor = await conn.execute(...)
        """
        if not self._initialized:
            await self.initialize()

        conn = await self._idle.get()
        try:
            yield conn
        finally:
            self._idle.put_nowait(conn)

    @asynccontextmanager
    async def transaction(
        self, immediate: bool = False
    ) -> AsyncIterator[aiosqlite.Connection]:
        """
        Borrow a connection inside a write transaction.

        Commits when the block exits cleanly, rolls back on any exception
        (including optimistic-lock conflicts raised by the caller).
        With ``immediate`` the write lock is taken up front.
        """
        async with self.acquire() as conn:
            try:
                if immediate:
                    await conn.execute("BEGIN IMMEDIATE")
                yield conn
                await conn.commit()
            except BaseException:
                await conn.rollback()
                raise

    async def ping(self) -> bool:
        """Liveness check used by the health endpoint."""
        async with self.acquire() as conn:
            cursor = await conn.execute("SELECT 1")
            row = await cursor.fetchone()
            return row is not None and row[0] == 1

    async def close(self) -> None:
        """Close every pooled connection."""
        async with self._lock:
            for conn in self._connections:
                await conn.close()
            self._connections.clear()
            while not self._idle.empty():
                self._idle.get_nowait()
            self._initialized = False
            logger.info("connection_pool_closed", db_path=str(self.db_path))


# Process-wide pool
_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Get or lazily create the process-wide pool from settings."""
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
    """Close and forget the process-wide pool."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


@asynccontextmanager
async def get_connection() -> AsyncIterator[aiosqlite.Connection]:
    """Read connection from the process-wide pool."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


@asynccontextmanager
async def get_transaction(immediate: bool = False) -> AsyncIterator[aiosqlite.Connection]:
    """Transactional connection from the process-wide pool."""
    pool = await get_pool()
    async with pool.transaction(immediate=immediate) as conn:
        yield conn
