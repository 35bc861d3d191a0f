"""Pytest fixtures for SQLite storage tests."""

from collections.abc import Callable

import pytest

from src.application.use_cases.process_sale import ProcessSaleUseCase
from src.core.entities import StockItem
from src.infrastructure.storage.sqlite.inventory_store import SQLiteInventoryStore
from src.infrastructure.storage.sqlite.sales_store import SQLiteSalesStore


@pytest.fixture
def sqlite_process_sale(sqlite_sales_store: SQLiteSalesStore) -> ProcessSaleUseCase:
    """Sale use case wired to the temporary SQLite store."""
    return ProcessSaleUseCase(sales_store=sqlite_sales_store)


@pytest.fixture
def seed_items(
    sqlite_inventory_store: SQLiteInventoryStore,
    make_stock_item: Callable[..., StockItem],
):
    """Insert stock items and return them with ids."""

    async def _seed(*specs: dict) -> list[StockItem]:
        return [await sqlite_inventory_store.create_item(make_stock_item(**spec)) for spec in specs]

    return _seed
