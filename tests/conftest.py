"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Callable, Generator
from decimal import Decimal
from pathlib import Path

import pytest

from src.config import reset_settings
from src.core.entities.stock_item import StockItem
from src.infrastructure.storage.memory import (
    InMemoryDatabase,
    InMemoryInventoryStore,
    InMemorySalesStore,
)
from src.infrastructure.storage.sqlite.connection import ConnectionPool
from src.infrastructure.storage.sqlite.inventory_store import SQLiteInventoryStore
from src.infrastructure.storage.sqlite.migrations.migrator import initialize_database
from src.infrastructure.storage.sqlite.sales_store import SQLiteSalesStore


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Point settings at a per-test data directory."""
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "data"))
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
async def migrated_db(temp_db_path: Path) -> Path:
    """Temporary database with all migrations applied."""
    await initialize_database(temp_db_path, create_backup_before=False)
    return temp_db_path


@pytest.fixture
async def pool(migrated_db: Path) -> AsyncGenerator[ConnectionPool, None]:
    """Connection pool over the migrated temporary database."""
    pool = ConnectionPool(migrated_db, pool_size=3, busy_timeout=5000)
    await pool.initialize()
    yield pool
    await pool.close()


@pytest.fixture
def sqlite_sales_store(pool: ConnectionPool) -> SQLiteSalesStore:
    return SQLiteSalesStore(pool)


@pytest.fixture
def sqlite_inventory_store(pool: ConnectionPool) -> SQLiteInventoryStore:
    return SQLiteInventoryStore(pool)


@pytest.fixture
def memory_db() -> InMemoryDatabase:
    return InMemoryDatabase(lock_timeout=1.0)


@pytest.fixture
def memory_sales_store(memory_db: InMemoryDatabase) -> InMemorySalesStore:
    return InMemorySalesStore(memory_db)


@pytest.fixture
def memory_inventory_store(memory_db: InMemoryDatabase) -> InMemoryInventoryStore:
    return InMemoryInventoryStore(memory_db)


@pytest.fixture
def make_stock_item() -> Callable[..., StockItem]:
    """Factory for unsaved stock items."""

    def _make(
        name: str = "Paracetamol 500mg",
        price: str = "100.00",
        quantity_on_hand: int = 10,
        discount_rate: str | None = None,
        tax_rate: str | None = None,
    ) -> StockItem:
        return StockItem(
            name=name,
            price=Decimal(price),
            quantity_on_hand=quantity_on_hand,
            discount_rate=Decimal(discount_rate) if discount_rate is not None else None,
            tax_rate=Decimal(tax_rate) if tax_rate is not None else None,
        )

    return _make
