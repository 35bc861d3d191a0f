"""In-memory storage implementations."""

from src.infrastructure.storage.memory.database import InMemoryDatabase
from src.infrastructure.storage.memory.inventory_store import InMemoryInventoryStore
from src.infrastructure.storage.memory.sales_store import (
    InMemorySalesStore,
    InMemorySaleUnitOfWork,
)

__all__ = [
    "InMemoryDatabase",
    "InMemoryInventoryStore",
    "InMemorySalesStore",
    "InMemorySaleUnitOfWork",
]
