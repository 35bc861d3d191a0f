"""In-memory implementation of sale storage."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime

from src.config import get_logger
from src.core.entities.sale import Invoice, Sale, SalePeriod
from src.core.entities.stock_item import StockItem
from src.core.exceptions import (
    InsufficientStockError,
    ItemNotFoundError,
    PersistenceError,
)
from src.core.interfaces.sales_store import ISalesStore, ISaleUnitOfWork
from src.infrastructure.storage.memory.database import InMemoryDatabase

logger = get_logger(__name__)


class InMemorySaleUnitOfWork(ISaleUnitOfWork):
    """Stages stock, sale and invoice writes until commit()."""

    def __init__(self, db: InMemoryDatabase):
        self._db = db
        self._quantities: dict[int, int] = {}
        self._sales: list[Sale] = []
        self._invoices: list[Invoice] = []

    async def get_stock_item(self, item_id: int) -> StockItem | None:
        item = self._db.stock_items.get(item_id)
        if item is None:
            return None
        staged = item.model_copy(deep=True)
        if item_id in self._quantities:
            staged.quantity_on_hand = self._quantities[item_id]
        return staged

    async def decrement_stock(self, item_id: int, quantity: int) -> StockItem:
        item = await self.get_stock_item(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        if not item.has_stock_for(quantity):
            raise InsufficientStockError(item_id, item.quantity_on_hand, quantity)

        item.quantity_on_hand -= quantity
        self._quantities[item_id] = item.quantity_on_hand
        logger.debug(
            "stock_decremented",
            item_id=item_id,
            quantity=quantity,
            remaining=item.quantity_on_hand,
        )
        return item

    async def add_sale(self, sale: Sale) -> Sale:
        sale.id = self._db.next_id("sales")
        sale.created_at = datetime.utcnow()
        for line in sale.lines:
            line.id = self._db.next_id("sale_lines")
            line.sale_id = sale.id
            line.created_at = sale.created_at
        self._sales.append(sale)
        return sale

    async def add_invoice(self, invoice: Invoice) -> Invoice:
        if invoice.invoice_number in self._db.invoices or any(
            staged.invoice_number == invoice.invoice_number for staged in self._invoices
        ):
            raise PersistenceError(
                "add_invoice", f"duplicate invoice number {invoice.invoice_number}"
            )
        invoice.id = self._db.next_id("invoices")
        self._invoices.append(invoice)
        return invoice

    def commit(self) -> None:
        """Apply staged writes to the database tables."""
        now = datetime.utcnow()
        for item_id, quantity in self._quantities.items():
            item = self._db.stock_items[item_id]
            item.quantity_on_hand = quantity
            item.updated_at = now

        invoices_by_sale = {inv.sale_id: inv for inv in self._invoices}
        for sale in self._sales:
            sale.invoice = invoices_by_sale.get(sale.id, sale.invoice)
            self._db.sales[sale.id] = sale.model_copy(deep=True)
        for invoice in self._invoices:
            self._db.invoices[invoice.invoice_number] = invoice.model_copy(deep=True)


class InMemorySalesStore(ISalesStore):
    """In-memory sale storage backed by an InMemoryDatabase."""

    def __init__(self, db: InMemoryDatabase):
        self._db = db

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[InMemorySaleUnitOfWork]:
        async with self._db.locked("unit_of_work"):
            uow = InMemorySaleUnitOfWork(self._db)
            try:
                yield uow
            except Exception as e:
                logger.info("unit_of_work_rolled_back", error_type=type(e).__name__)
                raise
            uow.commit()

    async def get_sale(self, sale_id: int) -> Sale | None:
        sale = self._db.sales.get(sale_id)
        return sale.model_copy(deep=True) if sale else None

    async def get_sale_by_invoice_number(self, invoice_number: str) -> Sale | None:
        invoice = self._db.invoices.get(invoice_number)
        if invoice is None:
            return None
        return await self.get_sale(invoice.sale_id)

    async def list_sales(
        self,
        limit: int = 100,
        offset: int = 0,
        period: SalePeriod | None = None,
        search: str | None = None,
    ) -> list[Sale]:
        matched = self._filter(period, search)
        return [s.model_copy(deep=True) for s in matched[offset:offset + limit]]

    async def count_sales(
        self,
        period: SalePeriod | None = None,
        search: str | None = None,
    ) -> int:
        return len(self._filter(period, search))

    def _filter(self, period: SalePeriod | None, search: str | None) -> list[Sale]:
        """Sales matching the filters, newest first."""
        date_range = period.date_range() if period else None
        needle = search.strip().lower() if search else ""

        matched = []
        for sale in sorted(self._db.sales.values(), key=lambda s: s.id, reverse=True):
            if date_range and not date_range[0] <= sale.sale_date < date_range[1]:
                continue
            if needle:
                fields = (
                    sale.invoice.invoice_number if sale.invoice else None,
                    sale.customer_id,
                    sale.staff_id,
                )
                if not any(f and needle in f.lower() for f in fields):
                    continue
            matched.append(sale)
        return matched
