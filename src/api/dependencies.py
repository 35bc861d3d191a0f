"""
Dependency injection container for FastAPI.

Provides store and use case instances to route handlers.
"""

from functools import lru_cache

from fastapi import Header

from src.application.use_cases import ProcessSaleUseCase, RestockItemUseCase
from src.config import Settings, get_settings
from src.core.exceptions import ValidationError
from src.core.interfaces import IInventoryStore, ISalesStore
from src.core.services import InvoiceNumberingStrategy, create_invoice_numbering
from src.infrastructure.storage.memory import (
    InMemoryDatabase,
    InMemoryInventoryStore,
    InMemorySalesStore,
)
from src.infrastructure.storage.sqlite import (
    SQLiteInventoryStore,
    SQLiteSalesStore,
    get_pool,
)


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


@lru_cache
def get_memory_database() -> InMemoryDatabase:
    """Process-wide database for the memory backend."""
    return InMemoryDatabase(lock_timeout=get_app_settings().sales.lock_timeout)


def get_invoice_numbering() -> InvoiceNumberingStrategy:
    """Get the configured invoice numbering strategy."""
    sales = get_app_settings().sales
    return create_invoice_numbering(
        sales.invoice_numbering,
        prefix=sales.invoice_prefix,
        width=sales.invoice_number_width,
    )


# Store dependencies
async def get_sales_store() -> ISalesStore:
    """Get sales store for the configured backend."""
    if get_app_settings().storage.backend == "memory":
        return InMemorySalesStore(get_memory_database())
    return SQLiteSalesStore(await get_pool())


async def get_inventory_store() -> IInventoryStore:
    """Get inventory store for the configured backend."""
    if get_app_settings().storage.backend == "memory":
        return InMemoryInventoryStore(get_memory_database())
    return SQLiteInventoryStore(await get_pool())


# Use case dependencies
async def get_process_sale_use_case() -> ProcessSaleUseCase:
    """Get process sale use case."""
    return ProcessSaleUseCase(
        sales_store=await get_sales_store(),
        invoice_numbering=get_invoice_numbering(),
    )


async def get_restock_item_use_case() -> RestockItemUseCase:
    """Get restock item use case."""
    return RestockItemUseCase(inventory_store=await get_inventory_store())


# Request context
def get_staff_id(x_staff_id: str | None = Header(default=None)) -> str:
    """Staff identity, set by the authenticating gateway in X-Staff-Id."""
    if not x_staff_id or not x_staff_id.strip():
        raise ValidationError("X-Staff-Id", "staff identity header is required")
    return x_staff_id.strip()
