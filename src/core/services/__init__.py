"""
Core business logic services.

Layer-pure services that depend only on:
- src/core/entities/*
- src/core/exceptions.py

NO infrastructure imports. No I/O.
"""

from src.core.services.invoice_numbering import (
    InvoiceNumberingStrategy,
    SaleIdInvoiceNumbering,
    UUIDInvoiceNumbering,
    create_invoice_numbering,
)
from src.core.services.pricing import (
    LinePricing,
    OrderTotals,
    line_discount,
    line_tax,
    line_total,
    order_aggregate,
    price_line,
    round_money,
)

__all__ = [
    # Pricing
    "LinePricing",
    "OrderTotals",
    "line_discount",
    "line_tax",
    "line_total",
    "order_aggregate",
    "price_line",
    "round_money",
    # Invoice numbering
    "InvoiceNumberingStrategy",
    "SaleIdInvoiceNumbering",
    "UUIDInvoiceNumbering",
    "create_invoice_numbering",
]
