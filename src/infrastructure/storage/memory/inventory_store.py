"""In-memory implementation of inventory storage."""

from datetime import datetime

from src.config import get_logger
from src.core.entities.stock_item import StockItem
from src.core.exceptions import ItemNotFoundError
from src.core.interfaces.inventory_store import IInventoryStore
from src.infrastructure.storage.memory.database import InMemoryDatabase

logger = get_logger(__name__)


class InMemoryInventoryStore(IInventoryStore):
    """In-memory stock item storage backed by an InMemoryDatabase."""

    def __init__(self, db: InMemoryDatabase):
        self._db = db

    async def create_item(self, item: StockItem) -> StockItem:
        async with self._db.locked("create_item"):
            now = datetime.utcnow()
            item.id = self._db.next_id("stock_items")
            item.created_at = now
            item.updated_at = now
            self._db.stock_items[item.id] = item.model_copy(deep=True)

        logger.info(
            "stock_item_created",
            item_id=item.id,
            name=item.name,
            quantity_on_hand=item.quantity_on_hand,
        )
        return item

    async def get_item(self, item_id: int) -> StockItem | None:
        item = self._db.stock_items.get(item_id)
        return item.model_copy(deep=True) if item else None

    async def list_items(self, limit: int = 100, offset: int = 0) -> list[StockItem]:
        ordered = sorted(self._db.stock_items.values(), key=lambda i: (i.name, i.id))
        return [i.model_copy(deep=True) for i in ordered[offset:offset + limit]]

    async def restock(self, item_id: int, quantity: int) -> StockItem:
        async with self._db.locked("restock"):
            item = self._db.stock_items.get(item_id)
            if item is None:
                raise ItemNotFoundError(item_id)
            item.quantity_on_hand += quantity
            item.updated_at = datetime.utcnow()
            result = item.model_copy(deep=True)

        logger.info(
            "stock_restocked",
            item_id=item_id,
            quantity=quantity,
            quantity_on_hand=result.quantity_on_hand,
        )
        return result
