"""Storage infrastructure implementations."""

from src.infrastructure.storage.memory import (
    InMemoryDatabase,
    InMemoryInventoryStore,
    InMemorySalesStore,
)
from src.infrastructure.storage.sqlite import (
    ConnectionPool,
    SQLiteInventoryStore,
    SQLiteSalesStore,
    close_pool,
    get_pool,
)

__all__ = [
    # SQLite stores
    "SQLiteSalesStore",
    "SQLiteInventoryStore",
    # Connection pool
    "ConnectionPool",
    "get_pool",
    "close_pool",
    # In-memory stores
    "InMemoryDatabase",
    "InMemorySalesStore",
    "InMemoryInventoryStore",
]
