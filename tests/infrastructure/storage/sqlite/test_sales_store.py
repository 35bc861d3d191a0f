"""Tests for the SQLite sales store and sale processing against it."""

import asyncio
from decimal import Decimal

import aiosqlite
import pytest

from src.application.dto.requests import SaleCreateRequest, SaleLineRequest
from src.application.use_cases.process_sale import ProcessSaleUseCase
from src.core.entities import Invoice, PaymentMethod, SalePeriod
from src.core.exceptions import (
    InsufficientStockError,
    ItemNotFoundError,
    PersistenceError,
)
from src.core.services.invoice_numbering import InvoiceNumberingStrategy
from src.infrastructure.storage.sqlite.sales_store import SQLiteSalesStore

D = Decimal


def _request(*lines: tuple[int, int], extra: str = "0") -> SaleCreateRequest:
    return SaleCreateRequest(
        lines=[SaleLineRequest(item_id=i, quantity=q) for i, q in lines],
        payment_method=PaymentMethod.CARD,
        extra_discount_rate=D(extra),
        notes="counter 2",
    )


async def _count(db_path, table: str) -> int:
    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute(f"SELECT COUNT(*) FROM {table}")
        return (await cursor.fetchone())[0]


class FixedInvoiceNumbering(InvoiceNumberingStrategy):
    """Always returns the same number; the second sale hits the UNIQUE index."""

    def generate(self, sale_id, issued_at):
        return "INV-FIXED"


class TestProcessSaleSQLite:
    async def test_sale_persisted_with_lines_and_invoice(
        self, sqlite_process_sale, sqlite_sales_store, sqlite_inventory_store, seed_items
    ):
        first, second = await seed_items(
            {"name": "Amoxicillin", "price": "100.00", "discount_rate": "0.10", "tax_rate": "0.05"},
            {"name": "Saline", "price": "50.00"},
        )

        sale = await sqlite_process_sale.execute(
            _request((first.id, 2), (second.id, 1), extra="0.10"), staff_id="staff-1"
        )

        stored = await sqlite_sales_store.get_sale(sale.id)
        assert stored is not None
        assert stored.grand_total == D("216.00")
        assert stored.extra_discount_amount == D("23.00")
        assert stored.payment_method == PaymentMethod.CARD
        assert stored.notes == "counter 2"
        assert [line.item_name for line in stored.lines] == ["Amoxicillin", "Saline"]
        assert stored.lines[0].line_total == D("189.00")
        assert stored.invoice.invoice_number == sale.invoice.invoice_number

        assert (await sqlite_inventory_store.get_item(first.id)).quantity_on_hand == 8
        assert (await sqlite_inventory_store.get_item(second.id)).quantity_on_hand == 9

    async def test_lookup_by_invoice_number(self, sqlite_process_sale, sqlite_sales_store, seed_items):
        (item,) = await seed_items({})
        sale = await sqlite_process_sale.execute(_request((item.id, 1)), staff_id="s")

        found = await sqlite_sales_store.get_sale_by_invoice_number(sale.invoice.invoice_number)

        assert found.id == sale.id
        assert await sqlite_sales_store.get_sale_by_invoice_number("INV-NOPE") is None

    async def test_list_sales_newest_first(self, sqlite_process_sale, sqlite_sales_store, seed_items):
        (item,) = await seed_items({})
        ids = [
            (await sqlite_process_sale.execute(_request((item.id, 1)), staff_id="s")).id
            for _ in range(3)
        ]

        listed = await sqlite_sales_store.list_sales(limit=2)

        assert [s.id for s in listed] == [ids[2], ids[1]]

    async def test_insufficient_stock_leaves_stock_unchanged(
        self, sqlite_process_sale, sqlite_inventory_store, seed_items, migrated_db
    ):
        (item,) = await seed_items({"quantity_on_hand": 3})

        with pytest.raises(InsufficientStockError) as exc_info:
            await sqlite_process_sale.execute(_request((item.id, 5)), staff_id="s")

        assert exc_info.value.available == 3
        assert exc_info.value.requested == 5
        assert (await sqlite_inventory_store.get_item(item.id)).quantity_on_hand == 3
        assert await _count(migrated_db, "sales") == 0

    async def test_failure_on_later_line_rolls_back_earlier_decrements(
        self, sqlite_process_sale, sqlite_inventory_store, seed_items, migrated_db
    ):
        (item,) = await seed_items({"quantity_on_hand": 10})

        with pytest.raises(ItemNotFoundError) as exc_info:
            await sqlite_process_sale.execute(_request((item.id, 4), (9999, 1)), staff_id="s")

        assert exc_info.value.line_index == 1
        assert (await sqlite_inventory_store.get_item(item.id)).quantity_on_hand == 10
        for table in ("sales", "sale_lines", "invoices"):
            assert await _count(migrated_db, table) == 0

    async def test_duplicate_lines_checked_against_remaining_stock(
        self, sqlite_process_sale, sqlite_inventory_store, seed_items
    ):
        (item,) = await seed_items({"quantity_on_hand": 5})

        with pytest.raises(InsufficientStockError) as exc_info:
            await sqlite_process_sale.execute(_request((item.id, 3), (item.id, 3)), staff_id="s")

        assert exc_info.value.line_index == 1
        assert exc_info.value.available == 2
        assert (await sqlite_inventory_store.get_item(item.id)).quantity_on_hand == 5

    async def test_invoice_number_collision_rolls_back(
        self, sqlite_sales_store, sqlite_inventory_store, seed_items, migrated_db
    ):
        (item,) = await seed_items({"quantity_on_hand": 10})
        use_case = ProcessSaleUseCase(
            sales_store=sqlite_sales_store, invoice_numbering=FixedInvoiceNumbering()
        )
        await use_case.execute(_request((item.id, 1)), staff_id="s")

        with pytest.raises(PersistenceError):
            await use_case.execute(_request((item.id, 1)), staff_id="s")

        assert (await sqlite_inventory_store.get_item(item.id)).quantity_on_hand == 9
        assert await _count(migrated_db, "sales") == 1

    async def test_concurrent_sales_never_oversell(
        self, sqlite_process_sale, sqlite_inventory_store, seed_items
    ):
        """Two sales of 6 against 10 on hand: exactly one succeeds."""
        (item,) = await seed_items({"quantity_on_hand": 10})

        results = await asyncio.gather(
            sqlite_process_sale.execute(_request((item.id, 6)), staff_id="a"),
            sqlite_process_sale.execute(_request((item.id, 6)), staff_id="b"),
            return_exceptions=True,
        )

        succeeded = [r for r in results if not isinstance(r, Exception)]
        failed = [r for r in results if isinstance(r, Exception)]
        assert len(succeeded) == 1
        assert len(failed) == 1
        assert isinstance(failed[0], InsufficientStockError)
        assert (await sqlite_inventory_store.get_item(item.id)).quantity_on_hand == 4

    async def test_concurrent_sales_within_stock_all_succeed(
        self, sqlite_process_sale, sqlite_inventory_store, seed_items
    ):
        (item,) = await seed_items({"quantity_on_hand": 10})

        results = await asyncio.gather(
            *[sqlite_process_sale.execute(_request((item.id, 2)), staff_id="s") for _ in range(5)]
        )

        assert len({sale.invoice.invoice_number for sale in results}) == 5
        assert (await sqlite_inventory_store.get_item(item.id)).quantity_on_hand == 0


class TestSQLiteSaleUnitOfWork:
    async def test_guarded_decrement(self, sqlite_sales_store: SQLiteSalesStore, seed_items):
        (item,) = await seed_items({"quantity_on_hand": 2})

        with pytest.raises(InsufficientStockError):
            async with sqlite_sales_store.unit_of_work() as uow:
                await uow.decrement_stock(item.id, 3)

    async def test_decrement_unknown_item(self, sqlite_sales_store: SQLiteSalesStore):
        with pytest.raises(ItemNotFoundError):
            async with sqlite_sales_store.unit_of_work() as uow:
                await uow.decrement_stock(12345, 1)

    async def test_decrement_returns_updated_item(self, sqlite_sales_store, seed_items):
        (item,) = await seed_items({"quantity_on_hand": 5})

        async with sqlite_sales_store.unit_of_work() as uow:
            updated = await uow.decrement_stock(item.id, 2)

        assert updated.quantity_on_hand == 3

    async def test_invoice_requires_existing_sale(self, sqlite_sales_store):
        from datetime import datetime

        with pytest.raises(PersistenceError):
            async with sqlite_sales_store.unit_of_work() as uow:
                await uow.add_invoice(
                    Invoice(sale_id=777, invoice_number="INV-X", issued_at=datetime.utcnow())
                )

    async def test_get_missing_sale(self, sqlite_sales_store):
        assert await sqlite_sales_store.get_sale(1) is None


class TestListSalesFilters:
    @pytest.fixture
    async def three_sales(self, sqlite_process_sale, seed_items, migrated_db):
        (item,) = await seed_items({"quantity_on_hand": 50})
        sales = []
        for staff_id, customer_id in (("alice", "cust-100"), ("bob", "walk_in"), ("Alice", None)):
            request = SaleCreateRequest(
                lines=[SaleLineRequest(item_id=item.id, quantity=1)],
                payment_method=PaymentMethod.CASH,
                customer_id=customer_id,
            )
            sales.append(await sqlite_process_sale.execute(request, staff_id=staff_id))

        async with aiosqlite.connect(migrated_db) as conn:
            await conn.execute(
                "UPDATE sales SET sale_date = '2001-05-01' WHERE id = ?", (sales[1].id,)
            )
            await conn.commit()
        return sales

    async def test_search_staff_ignores_case(self, sqlite_sales_store, three_sales):
        listed = await sqlite_sales_store.list_sales(search="ALICE")

        assert [s.id for s in listed] == [three_sales[2].id, three_sales[0].id]
        assert await sqlite_sales_store.count_sales(search="ALICE") == 2

    async def test_search_customer_and_invoice(self, sqlite_sales_store, three_sales):
        by_customer = await sqlite_sales_store.list_sales(search="cust-1")
        number = three_sales[1].invoice.invoice_number
        by_invoice = await sqlite_sales_store.list_sales(search=number)

        assert [s.id for s in by_customer] == [three_sales[0].id]
        assert [s.id for s in by_invoice] == [three_sales[1].id]

    async def test_search_wildcards_are_literal(self, sqlite_sales_store, three_sales):
        assert await sqlite_sales_store.count_sales(search="%") == 0
        assert await sqlite_sales_store.count_sales(search="walk_in") == 1
        assert await sqlite_sales_store.count_sales(search="walkXin") == 0

    @pytest.mark.parametrize(
        ("period", "expected"),
        [
            (SalePeriod.TODAY, 2),
            (SalePeriod.THIS_MONTH, 2),
            (SalePeriod.THIS_YEAR, 2),
            (SalePeriod.ALL_TIME, 3),
            (None, 3),
        ],
    )
    async def test_period(self, sqlite_sales_store, three_sales, period, expected):
        listed = await sqlite_sales_store.list_sales(period=period)

        assert len(listed) == expected
        assert await sqlite_sales_store.count_sales(period=period) == expected

    async def test_period_and_search_combine(self, sqlite_sales_store, three_sales):
        listed = await sqlite_sales_store.list_sales(period=SalePeriod.TODAY, search="bob")
        assert listed == []

    async def test_count_ignores_paging(self, sqlite_sales_store, three_sales):
        assert len(await sqlite_sales_store.list_sales(limit=1, offset=1)) == 1
        assert await sqlite_sales_store.count_sales() == 3
