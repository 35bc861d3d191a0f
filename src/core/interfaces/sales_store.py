"""Abstract interfaces for sale persistence and the sale unit of work."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager

from src.core.entities.sale import Invoice, Sale, SalePeriod
from src.core.entities.stock_item import StockItem


class ISaleUnitOfWork(ABC):
    """
    One atomic sale transaction.

    Reads return state as of inside the transaction and hold whatever lock
    the backend needs so that a check followed by decrement_stock() cannot
    interleave with another sale on the same item.
    """

    @abstractmethod
    async def get_stock_item(self, item_id: int) -> StockItem | None:
        """Get a stock item by ID within the transaction."""
        pass

    @abstractmethod
    async def decrement_stock(self, item_id: int, quantity: int) -> StockItem:
        """
        Atomically subtract `quantity` from the item's quantity on hand.

        Raises InsufficientStockError if less than `quantity` is on hand and
        ItemNotFoundError if the item does not exist.
        """
        pass

    @abstractmethod
    async def add_sale(self, sale: Sale) -> Sale:
        """Persist a sale with all its lines; assigns ids."""
        pass

    @abstractmethod
    async def add_invoice(self, invoice: Invoice) -> Invoice:
        """Persist the invoice of a sale added in this unit of work."""
        pass


class ISalesStore(ABC):
    """Interface for sale persistence."""

    @abstractmethod
    def unit_of_work(self) -> AbstractAsyncContextManager[ISaleUnitOfWork]:
        """
        Open a unit of work.

        Commits when the block exits normally and rolls back when it raises.

        Usage:
            async with store.unit_of_work() as uow:
                item = await uow.get_stock_item(1)
        """
        pass

    @abstractmethod
    async def get_sale(self, sale_id: int) -> Sale | None:
        """Get sale by ID with lines and invoice."""
        pass

    @abstractmethod
    async def get_sale_by_invoice_number(self, invoice_number: str) -> Sale | None:
        """Get the sale documented by an invoice number."""
        pass

    @abstractmethod
    async def list_sales(
        self,
        limit: int = 100,
        offset: int = 0,
        period: SalePeriod | None = None,
        search: str | None = None,
    ) -> list[Sale]:
        """
        List sales, newest first, with lines and invoice.

        `period` keeps sales whose sale date falls in that calendar window.
        `search` keeps sales whose invoice number, customer id or staff id
        contains the text, ignoring case.
        """
        pass

    @abstractmethod
    async def count_sales(
        self,
        period: SalePeriod | None = None,
        search: str | None = None,
    ) -> int:
        """Count sales matching the same filters as list_sales()."""
        pass
