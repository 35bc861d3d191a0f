"""SQLite storage implementations."""

from src.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_pool,
)
from src.infrastructure.storage.sqlite.inventory_store import SQLiteInventoryStore
from src.infrastructure.storage.sqlite.sales_store import (
    SQLiteSalesStore,
    SQLiteSaleUnitOfWork,
)

# Type aliases for convenience
SalesStore = SQLiteSalesStore
InventoryStore = SQLiteInventoryStore

__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    # Store classes
    "SQLiteSalesStore",
    "SQLiteSaleUnitOfWork",
    "SQLiteInventoryStore",
    # Type aliases
    "SalesStore",
    "InventoryStore",
]
