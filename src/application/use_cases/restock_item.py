"""Restock Item Use Case: add received units to an item's stock."""

from src.application.dto.requests import RestockRequest
from src.application.dto.responses import StockItemResponse
from src.config import get_logger
from src.core.entities.stock_item import StockItem
from src.core.interfaces.inventory_store import IInventoryStore

logger = get_logger(__name__)


class RestockItemUseCase:
    """Increase quantity on hand for one stock item."""

    def __init__(self, inventory_store: IInventoryStore):
        self._inventory_store = inventory_store

    async def execute(self, item_id: int, request: RestockRequest) -> StockItem:
        """Execute restock; raises ItemNotFoundError for unknown items."""
        logger.info("restock_started", item_id=item_id, quantity=request.quantity)
        return await self._inventory_store.restock(item_id, request.quantity)

    def to_response(self, item: StockItem) -> StockItemResponse:
        """Convert result to API response."""
        return StockItemResponse.from_entity(item)
