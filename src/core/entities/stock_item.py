"""Stock item domain entity."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

MAX_PRICE = Decimal("9999999999.99")
MAX_QUANTITY = 1_000_000_000


class StockItem(BaseModel):
    """A sellable catalog item and its quantity on hand."""

    id: int | None = None
    name: str
    price: Decimal = Field(..., ge=0, le=MAX_PRICE)  # unit sale price
    quantity_on_hand: int = Field(default=0, ge=0)
    discount_rate: Decimal | None = Field(default=None, ge=0, le=1)
    tax_rate: Decimal | None = Field(default=None, ge=0, le=1)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def has_stock_for(self, quantity: int) -> bool:
        """True if `quantity` units can be sold right now."""
        return self.quantity_on_hand >= quantity
