"""
Invoice number strategies.

A number is derived once, inside the sale's transaction, from the persisted
sale id and the issue timestamp. The `invoices.invoice_number` column is
UNIQUE, so a strategy that ever repeats itself aborts the sale instead of
issuing a duplicate.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from uuid import UUID, uuid4

from src.core.exceptions import ConfigurationError


class InvoiceNumberingStrategy(ABC):
    """Produces human-readable invoice numbers."""

    def __init__(self, prefix: str = "INV"):
        self.prefix = prefix

    @abstractmethod
    def generate(self, sale_id: int, issued_at: datetime) -> str:
        """Return the invoice number for a persisted sale."""
        pass


class SaleIdInvoiceNumbering(InvoiceNumberingStrategy):
    """
    PREFIX-YYYY-<zero padded sale id>, e.g. INV-2026-000042.

    The full sale id is kept (never truncated), so numbers are unique as long
    as sale ids are; the width only pads.
    """

    def __init__(self, prefix: str = "INV", width: int = 6):
        super().__init__(prefix)
        self.width = width

    def generate(self, sale_id: int, issued_at: datetime) -> str:
        return f"{self.prefix}-{issued_at.year}-{sale_id:0{self.width}d}"


class UUIDInvoiceNumbering(InvoiceNumberingStrategy):
    """PREFIX-YYYYMMDD-<32 hex chars>; does not leak sale volume."""

    def __init__(self, prefix: str = "INV", uuid_factory=uuid4):
        super().__init__(prefix)
        self._uuid_factory = uuid_factory

    def generate(self, sale_id: int, issued_at: datetime) -> str:
        token: UUID = self._uuid_factory()
        return f"{self.prefix}-{issued_at:%Y%m%d}-{token.hex.upper()}"


def create_invoice_numbering(
    scheme: str, prefix: str = "INV", width: int = 6
) -> InvoiceNumberingStrategy:
    """Build the strategy named by SALES_INVOICE_NUMBERING."""
    if scheme == "sale_id":
        return SaleIdInvoiceNumbering(prefix=prefix, width=width)
    if scheme == "uuid":
        return UUIDInvoiceNumbering(prefix=prefix)
    raise ConfigurationError(
        f"Unknown invoice numbering scheme: {scheme}",
        code="CONFIGURATION_ERROR",
        details={"scheme": scheme},
    )
