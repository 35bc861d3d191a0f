"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from src.core.entities.sale import Sale
from src.core.entities.stock_item import StockItem


class SaleLineResponse(BaseModel):
    """Priced line of a sale."""

    id: int
    item_id: int
    item_name: str
    quantity: int
    unit_price: Decimal
    discount_rate: Decimal
    tax_rate: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    line_total: Decimal = Field(..., description="gross - discount + tax")


class InvoiceResponse(BaseModel):
    """Invoice issued for a sale."""

    id: int
    invoice_number: str
    issued_at: datetime
    status: str


class SaleResponse(BaseModel):
    """Sale response DTO."""

    id: int
    staff_id: str
    customer_id: str | None = None
    sub_total_before_discount: Decimal
    total_product_discount: Decimal
    sub_total_after_product_discount: Decimal
    extra_discount_rate: Decimal
    extra_discount_amount: Decimal
    sub_total: Decimal
    total_tax: Decimal
    grand_total: Decimal
    amount_paid: Decimal
    payment_method: str
    payment_status: str
    notes: str | None = None
    sale_date: date
    item_count: int
    lines: list[SaleLineResponse]
    invoice: InvoiceResponse | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, sale: Sale) -> "SaleResponse":
        return cls(
            id=sale.id,
            staff_id=sale.staff_id,
            customer_id=sale.customer_id,
            sub_total_before_discount=sale.sub_total_before_discount,
            total_product_discount=sale.total_product_discount,
            sub_total_after_product_discount=sale.sub_total_after_product_discount,
            extra_discount_rate=sale.extra_discount_rate,
            extra_discount_amount=sale.extra_discount_amount,
            sub_total=sale.sub_total,
            total_tax=sale.total_tax,
            grand_total=sale.grand_total,
            amount_paid=sale.amount_paid,
            payment_method=sale.payment_method.value,
            payment_status=sale.payment_status.value,
            notes=sale.notes,
            sale_date=sale.sale_date,
            item_count=sale.item_count,
            lines=[
                SaleLineResponse(
                    id=line.id,
                    item_id=line.item_id,
                    item_name=line.item_name,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    discount_rate=line.discount_rate,
                    tax_rate=line.tax_rate,
                    discount_amount=line.discount_amount,
                    tax_amount=line.tax_amount,
                    line_total=line.line_total,
                )
                for line in sale.lines
            ],
            invoice=(
                InvoiceResponse(
                    id=sale.invoice.id,
                    invoice_number=sale.invoice.invoice_number,
                    issued_at=sale.invoice.issued_at,
                    status=sale.invoice.status.value,
                )
                if sale.invoice
                else None
            ),
            created_at=sale.created_at,
        )


class SaleListResponse(BaseModel):
    """Paginated sale list response."""

    sales: list[SaleResponse]
    total: int = Field(..., description="Sales matching the filters, across all pages")
    limit: int
    offset: int


class StockItemResponse(BaseModel):
    """Stock item response DTO."""

    id: int
    name: str
    price: Decimal
    quantity_on_hand: int
    discount_rate: Decimal | None = None
    tax_rate: Decimal | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, item: StockItem) -> "StockItemResponse":
        return cls(**item.model_dump())


class StockItemListResponse(BaseModel):
    """Paginated stock item list response."""

    items: list[StockItemResponse]
    limit: int
    offset: int


class ComponentHealthResponse(BaseModel):
    """Health of one backing component."""

    name: str
    status: str
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ComponentHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INSUFFICIENT_STOCK)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    details: dict[str, Any] | None = Field(
        default=None, description="Structured error context (item_id, available, ...)"
    )
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
