"""Fixtures for API tests: the app wired to in-memory stores."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.dependencies import (
    get_inventory_store,
    get_process_sale_use_case,
    get_restock_item_use_case,
    get_sales_store,
)
from src.api.main import app
from src.application.use_cases import ProcessSaleUseCase, RestockItemUseCase
from src.core.services import SaleIdInvoiceNumbering
from src.infrastructure.storage.memory import InMemoryInventoryStore, InMemorySalesStore

STAFF_HEADERS = {"X-Staff-Id": "pharmacist-7"}


@pytest.fixture
async def api_client(
    memory_sales_store: InMemorySalesStore,
    memory_inventory_store: InMemoryInventoryStore,
) -> AsyncGenerator[AsyncClient, None]:
    overrides = {
        get_sales_store: lambda: memory_sales_store,
        get_inventory_store: lambda: memory_inventory_store,
        get_process_sale_use_case: lambda: ProcessSaleUseCase(
            sales_store=memory_sales_store,
            invoice_numbering=SaleIdInvoiceNumbering(prefix="INV", width=6),
        ),
        get_restock_item_use_case: lambda: RestockItemUseCase(
            inventory_store=memory_inventory_store
        ),
    }
    app.dependency_overrides.update(overrides)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    for dependency in overrides:
        app.dependency_overrides.pop(dependency, None)


@pytest.fixture
def create_item(api_client: AsyncClient):
    """Create a stock item through the API and return its JSON."""

    async def _create(**fields) -> dict:
        payload = {"name": "Paracetamol 500mg", "price": "100.00", "quantity_on_hand": 10}
        payload.update(fields)
        response = await api_client.post("/api/inventory/items", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _create
