"""
Process-local in-memory database.

All units of work and stock adjustments are serialized by one asyncio.Lock.
A unit of work stages its writes and applies them only on commit, so an
aborted sale leaves no trace.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from src.config import get_logger
from src.core.entities.sale import Invoice, Sale
from src.core.entities.stock_item import StockItem
from src.core.exceptions import TransactionTimeoutError

logger = get_logger(__name__)


class InMemoryDatabase:
    """Tables and id sequences shared by the in-memory stores."""

    def __init__(self, lock_timeout: float = 5.0):
        self.lock_timeout = lock_timeout
        self.stock_items: dict[int, StockItem] = {}
        self.sales: dict[int, Sale] = {}
        self.invoices: dict[str, Invoice] = {}

        self._sequences = {"stock_items": 0, "sales": 0, "sale_lines": 0, "invoices": 0}
        self._lock = asyncio.Lock()

    def next_id(self, table: str) -> int:
        """Allocate the next id for `table`. Ids are never reused."""
        self._sequences[table] += 1
        return self._sequences[table]

    @asynccontextmanager
    async def locked(self, operation: str) -> AsyncIterator["InMemoryDatabase"]:
        """Hold the database lock, giving up after `lock_timeout` seconds."""
        try:
            await asyncio.wait_for(self._lock.acquire(), timeout=self.lock_timeout)
        except asyncio.TimeoutError as e:
            raise TransactionTimeoutError(operation, self.lock_timeout) from e
        try:
            yield self
        finally:
            self._lock.release()
