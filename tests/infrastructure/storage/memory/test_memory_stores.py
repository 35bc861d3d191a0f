"""Tests for the in-memory sales and inventory stores."""

import asyncio
from datetime import date, datetime
from decimal import Decimal

import pytest

from src.application.dto.requests import SaleCreateRequest, SaleLineRequest
from src.application.use_cases.process_sale import ProcessSaleUseCase
from src.core.entities import Invoice, PaymentMethod, SalePeriod
from src.core.exceptions import (
    InsufficientStockError,
    ItemNotFoundError,
    PersistenceError,
    TransactionTimeoutError,
)
from src.infrastructure.storage.memory import (
    InMemoryDatabase,
    InMemoryInventoryStore,
    InMemorySalesStore,
)


def _request(*lines: tuple[int, int]) -> SaleCreateRequest:
    return SaleCreateRequest(
        lines=[SaleLineRequest(item_id=i, quantity=q) for i, q in lines],
        payment_method=PaymentMethod.UPI,
    )


@pytest.fixture
def process_sale(memory_sales_store: InMemorySalesStore) -> ProcessSaleUseCase:
    return ProcessSaleUseCase(sales_store=memory_sales_store)


class TestInMemoryInventoryStore:
    async def test_create_assigns_ids(self, memory_inventory_store: InMemoryInventoryStore, make_stock_item):
        first = await memory_inventory_store.create_item(make_stock_item(name="A"))
        second = await memory_inventory_store.create_item(make_stock_item(name="B"))
        assert (first.id, second.id) == (1, 2)

    async def test_get_returns_copy(self, memory_inventory_store, make_stock_item):
        item = await memory_inventory_store.create_item(make_stock_item())
        fetched = await memory_inventory_store.get_item(item.id)
        fetched.quantity_on_hand = 0
        assert (await memory_inventory_store.get_item(item.id)).quantity_on_hand == 10

    async def test_list_ordered(self, memory_inventory_store, make_stock_item):
        for name in ("Zinc", "Aspirin"):
            await memory_inventory_store.create_item(make_stock_item(name=name))
        assert [i.name for i in await memory_inventory_store.list_items()] == ["Aspirin", "Zinc"]

    async def test_restock(self, memory_inventory_store, make_stock_item):
        item = await memory_inventory_store.create_item(make_stock_item(quantity_on_hand=1))
        assert (await memory_inventory_store.restock(item.id, 4)).quantity_on_hand == 5

    async def test_restock_missing(self, memory_inventory_store):
        with pytest.raises(ItemNotFoundError):
            await memory_inventory_store.restock(1, 1)


class TestInMemorySales:
    async def test_sale_committed(self, process_sale, memory_sales_store, memory_inventory_store, make_stock_item):
        item = await memory_inventory_store.create_item(
            make_stock_item(price="100.00", discount_rate="0.10", tax_rate="0.05")
        )

        sale = await process_sale.execute(_request((item.id, 2)), staff_id="s")

        assert sale.grand_total == Decimal("189.00")
        stored = await memory_sales_store.get_sale(sale.id)
        assert stored.invoice.invoice_number == sale.invoice.invoice_number
        assert (await memory_sales_store.get_sale_by_invoice_number(sale.invoice.invoice_number)).id == sale.id
        assert (await memory_inventory_store.get_item(item.id)).quantity_on_hand == 8

    async def test_insufficient_stock_leaves_nothing(
        self, process_sale, memory_sales_store, memory_inventory_store, make_stock_item
    ):
        item = await memory_inventory_store.create_item(make_stock_item(quantity_on_hand=3))

        with pytest.raises(InsufficientStockError) as exc_info:
            await process_sale.execute(_request((item.id, 5)), staff_id="s")

        assert (exc_info.value.available, exc_info.value.requested) == (3, 5)
        assert (await memory_inventory_store.get_item(item.id)).quantity_on_hand == 3
        assert await memory_sales_store.list_sales() == []

    async def test_staged_decrements_discarded_on_failure(
        self, process_sale, memory_sales_store, memory_inventory_store, make_stock_item
    ):
        item = await memory_inventory_store.create_item(make_stock_item(quantity_on_hand=10))

        with pytest.raises(ItemNotFoundError):
            await process_sale.execute(_request((item.id, 4), (999, 1)), staff_id="s")

        assert (await memory_inventory_store.get_item(item.id)).quantity_on_hand == 10
        assert await memory_sales_store.list_sales() == []

    async def test_concurrent_sales_never_oversell(
        self, process_sale, memory_inventory_store, make_stock_item
    ):
        item = await memory_inventory_store.create_item(make_stock_item(quantity_on_hand=10))

        results = await asyncio.gather(
            process_sale.execute(_request((item.id, 6)), staff_id="a"),
            process_sale.execute(_request((item.id, 6)), staff_id="b"),
            return_exceptions=True,
        )

        errors = [r for r in results if isinstance(r, Exception)]
        assert len(errors) == 1
        assert isinstance(errors[0], InsufficientStockError)
        assert (await memory_inventory_store.get_item(item.id)).quantity_on_hand == 4

    async def test_list_sales_newest_first(self, process_sale, memory_sales_store, memory_inventory_store, make_stock_item):
        item = await memory_inventory_store.create_item(make_stock_item())
        for _ in range(3):
            await process_sale.execute(_request((item.id, 1)), staff_id="s")

        assert [s.id for s in await memory_sales_store.list_sales(limit=2)] == [3, 2]

    async def test_duplicate_invoice_number(self, memory_sales_store):
        now = datetime.utcnow()
        with pytest.raises(PersistenceError):
            async with memory_sales_store.unit_of_work() as uow:
                await uow.add_invoice(Invoice(sale_id=1, invoice_number="X", issued_at=now))
                await uow.add_invoice(Invoice(sale_id=2, invoice_number="X", issued_at=now))


class TestInMemoryListFilters:
    @pytest.fixture
    async def three_sales(self, process_sale, memory_db, memory_inventory_store, make_stock_item):
        item = await memory_inventory_store.create_item(make_stock_item(quantity_on_hand=50))
        sales = []
        for staff_id, customer_id in (("alice", "cust-100"), ("bob", "walk_in"), ("Alice", None)):
            request = SaleCreateRequest(
                lines=[SaleLineRequest(item_id=item.id, quantity=1)],
                payment_method=PaymentMethod.CASH,
                customer_id=customer_id,
            )
            sales.append(await process_sale.execute(request, staff_id=staff_id))
        memory_db.sales[sales[1].id].sale_date = date(2001, 5, 1)
        return sales

    async def test_search(self, memory_sales_store, three_sales):
        listed = await memory_sales_store.list_sales(search="ALICE")
        number = three_sales[1].invoice.invoice_number

        assert [s.id for s in listed] == [three_sales[2].id, three_sales[0].id]
        assert await memory_sales_store.count_sales(search="cust-1") == 1
        assert [s.id for s in await memory_sales_store.list_sales(search=number)] == [three_sales[1].id]
        assert await memory_sales_store.count_sales(search="%") == 0

    @pytest.mark.parametrize(
        ("period", "expected"),
        [(SalePeriod.TODAY, 2), (SalePeriod.THIS_YEAR, 2), (SalePeriod.ALL_TIME, 3), (None, 3)],
    )
    async def test_period(self, memory_sales_store, three_sales, period, expected):
        assert len(await memory_sales_store.list_sales(period=period)) == expected
        assert await memory_sales_store.count_sales(period=period) == expected

    async def test_count_ignores_paging(self, memory_sales_store, three_sales):
        assert len(await memory_sales_store.list_sales(limit=1)) == 1
        assert await memory_sales_store.count_sales() == 3


class TestLockTimeout:
    async def test_unit_of_work_times_out(self):
        db = InMemoryDatabase(lock_timeout=0.05)
        store = InMemorySalesStore(db)

        async with store.unit_of_work():
            with pytest.raises(TransactionTimeoutError):
                async with store.unit_of_work():
                    pass

    async def test_restock_waits_for_sale(self, make_stock_item):
        db = InMemoryDatabase(lock_timeout=0.05)
        inventory = InMemoryInventoryStore(db)
        item = await inventory.create_item(make_stock_item())

        async with InMemorySalesStore(db).unit_of_work():
            with pytest.raises(TransactionTimeoutError):
                await inventory.restock(item.id, 1)
