"""Abstract interface for inventory storage."""

from abc import ABC, abstractmethod

from src.core.entities.stock_item import StockItem


class IInventoryStore(ABC):
    """Interface for stock item persistence outside of sales."""

    @abstractmethod
    async def create_item(self, item: StockItem) -> StockItem:
        """Create a new stock item."""
        pass

    @abstractmethod
    async def get_item(self, item_id: int) -> StockItem | None:
        """Get stock item by ID."""
        pass

    @abstractmethod
    async def list_items(
        self, limit: int = 100, offset: int = 0
    ) -> list[StockItem]:
        """List stock items with pagination."""
        pass

    @abstractmethod
    async def restock(self, item_id: int, quantity: int) -> StockItem:
        """
        Atomically add `quantity` to the item's quantity on hand.

        Raises ItemNotFoundError if the item does not exist.
        """
        pass
