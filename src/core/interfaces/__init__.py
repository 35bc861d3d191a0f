"""Core interfaces (ports) for dependency injection."""

from src.core.interfaces.inventory_store import IInventoryStore
from src.core.interfaces.sales_store import ISalesStore, ISaleUnitOfWork

__all__ = [
    "IInventoryStore",
    "ISalesStore",
    "ISaleUnitOfWork",
]
