"""Core domain entities."""

from src.core.entities.sale import (
    Invoice,
    InvoiceStatus,
    PaymentMethod,
    PaymentStatus,
    Sale,
    SaleLineRecord,
    SalePeriod,
)
from src.core.entities.stock_item import StockItem

__all__ = [
    "StockItem",
    "Sale",
    "SaleLineRecord",
    "Invoice",
    "InvoiceStatus",
    "PaymentMethod",
    "PaymentStatus",
    "SalePeriod",
]
