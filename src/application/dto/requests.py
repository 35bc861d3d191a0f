"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from src.core.entities.sale import PaymentMethod
from src.core.entities.stock_item import MAX_PRICE, MAX_QUANTITY
from src.core.exceptions import ValidationError

# --- Sales ---


class SaleLineRequest(BaseModel):
    """One requested cart line."""

    item_id: int = Field(..., description="Stock item ID")
    quantity: int = Field(..., ge=1, le=MAX_QUANTITY, description="Units to sell")
    discount_override: Decimal | None = Field(
        default=None,
        ge=0,
        le=1,
        description="Discount rate replacing the item's own rate",
        examples=["0.10"],
    )
    tax_override: Decimal | None = Field(
        default=None,
        ge=0,
        le=1,
        description="Tax rate replacing the item's own rate",
        examples=["0.05"],
    )


class SaleCreateRequest(BaseModel):
    """Request to process a sale."""

    lines: list[SaleLineRequest] = Field(
        ..., min_length=1, description="Cart lines, processed in order"
    )
    customer_id: str | None = Field(default=None, description="Customer reference")
    payment_method: PaymentMethod = Field(..., description="How the sale is paid")
    extra_discount_rate: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        le=1,
        description="Order-level discount applied after line discounts, before tax",
    )
    notes: str | None = Field(default=None, max_length=1000, description="Free-text notes")


def parse_sale_request(data: dict[str, Any]) -> SaleCreateRequest:
    """
    Build a SaleCreateRequest from raw data.

    Raises:
        ValidationError: naming the first offending field
    """
    try:
        return SaleCreateRequest.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "request"
        raise ValidationError(field, first["msg"], first.get("input")) from e


# --- Inventory ---


class CreateStockItemRequest(BaseModel):
    """Request to add a sellable item to the catalog."""

    name: str = Field(..., min_length=1, max_length=255, description="Item name")
    price: Decimal = Field(..., ge=0, le=MAX_PRICE, description="Unit sale price")
    quantity_on_hand: int = Field(
        default=0, ge=0, le=MAX_QUANTITY, description="Opening stock"
    )
    discount_rate: Decimal | None = Field(
        default=None, ge=0, le=1, description="Default line discount rate"
    )
    tax_rate: Decimal | None = Field(
        default=None, ge=0, le=1, description="Default line tax rate"
    )


class RestockRequest(BaseModel):
    """Request to add units to an item's stock."""

    quantity: int = Field(..., ge=1, le=MAX_QUANTITY, description="Units received")
