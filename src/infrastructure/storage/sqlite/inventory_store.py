"""SQLite implementation of inventory storage."""

from datetime import datetime
from decimal import Decimal

import aiosqlite

from src.config import get_logger
from src.core.entities.stock_item import StockItem
from src.core.exceptions import ItemNotFoundError
from src.core.interfaces.inventory_store import IInventoryStore
from src.infrastructure.storage.sqlite.connection import ConnectionPool

logger = get_logger(__name__)


def _optional_decimal(value: str | None) -> Decimal | None:
    return Decimal(value) if value is not None else None


def row_to_stock_item(row: aiosqlite.Row) -> StockItem:
    """Convert a database row to a StockItem entity."""
    created_at = datetime.utcnow()
    if row["created_at"]:
        try:
            created_at = datetime.fromisoformat(row["created_at"])
        except (ValueError, TypeError):
            pass

    updated_at = datetime.utcnow()
    if row["updated_at"]:
        try:
            updated_at = datetime.fromisoformat(row["updated_at"])
        except (ValueError, TypeError):
            pass

    return StockItem(
        id=row["id"],
        name=row["name"],
        price=Decimal(row["price"]),
        quantity_on_hand=row["quantity_on_hand"],
        discount_rate=_optional_decimal(row["discount_rate"]),
        tax_rate=_optional_decimal(row["tax_rate"]),
        created_at=created_at,
        updated_at=updated_at,
    )


class SQLiteInventoryStore(IInventoryStore):
    """SQLite implementation of stock item storage."""

    def __init__(self, pool: ConnectionPool):
        self._pool = pool

    async def create_item(self, item: StockItem) -> StockItem:
        """Create a new stock item."""
        now = datetime.utcnow()
        item.created_at = now
        item.updated_at = now
        async with self._pool.transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO stock_items (
                    name, price, quantity_on_hand,
                    discount_rate, tax_rate, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    item.name,
                    str(item.price),
                    item.quantity_on_hand,
                    str(item.discount_rate) if item.discount_rate is not None else None,
                    str(item.tax_rate) if item.tax_rate is not None else None,
                    item.created_at.isoformat(),
                    item.updated_at.isoformat(),
                ),
            )
            item.id = cursor.lastrowid

        logger.info(
            "stock_item_created",
            item_id=item.id,
            name=item.name,
            quantity_on_hand=item.quantity_on_hand,
        )
        return item

    async def get_item(self, item_id: int) -> StockItem | None:
        """Get stock item by ID."""
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                "SELECT * FROM stock_items WHERE id = ?", (item_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return row_to_stock_item(row)

    async def list_items(self, limit: int = 100, offset: int = 0) -> list[StockItem]:
        """List stock items ordered by name."""
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                """
                SELECT * FROM stock_items
                ORDER BY name, id
                LIMIT ? OFFSET ?
                """,
                (limit, offset),
            )
            rows = await cursor.fetchall()
            return [row_to_stock_item(r) for r in rows]

    async def restock(self, item_id: int, quantity: int) -> StockItem:
        """Add `quantity` units to an item's quantity on hand."""
        async with self._pool.transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE stock_items
                SET quantity_on_hand = quantity_on_hand + ?, updated_at = ?
                WHERE id = ?
                """,
                (quantity, datetime.utcnow().isoformat(), item_id),
            )
            if cursor.rowcount == 0:
                raise ItemNotFoundError(item_id)

            cursor = await conn.execute(
                "SELECT * FROM stock_items WHERE id = ?", (item_id,)
            )
            item = row_to_stock_item(await cursor.fetchone())

        logger.info(
            "stock_restocked",
            item_id=item_id,
            quantity=quantity,
            quantity_on_hand=item.quantity_on_hand,
        )
        return item
