"""Sale, sale line and invoice domain entities."""

from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from pydantic import BaseModel, Field, model_validator

MONEY = Decimal("0.01")


class PaymentMethod(str, Enum):
    """Accepted payment methods at the counter."""

    CASH = "CASH"
    CARD = "CARD"
    UPI = "UPI"
    BANK_TRANSFER = "BANK_TRANSFER"
    INSURANCE = "INSURANCE"
    OTHER = "OTHER"


class PaymentStatus(str, Enum):
    """Payment state of a sale. Sales are fully paid at point of sale."""

    PAID = "PAID"


class InvoiceStatus(str, Enum):
    """Invoice state. Invoices are issued together with their sale."""

    ISSUED = "ISSUED"


class SalePeriod(str, Enum):
    """Calendar window for listing sales by sale date."""

    TODAY = "today"
    THIS_MONTH = "this_month"
    THIS_YEAR = "this_year"
    ALL_TIME = "all_time"

    def date_range(self, today: date | None = None) -> tuple[date, date] | None:
        """Half-open `[start, end)` range of sale dates, or None for all time."""
        today = today or date.today()
        if self is SalePeriod.TODAY:
            return today, today + timedelta(days=1)
        if self is SalePeriod.THIS_MONTH:
            start = today.replace(day=1)
            if start.month == 12:
                return start, start.replace(year=start.year + 1, month=1)
            return start, start.replace(month=start.month + 1)
        if self is SalePeriod.THIS_YEAR:
            start = today.replace(month=1, day=1)
            return start, start.replace(year=start.year + 1)
        return None


class SaleLineRecord(BaseModel):
    """A persisted line of a sale with price and rates snapshotted at sale time."""

    id: int | None = None
    sale_id: int | None = None
    item_id: int
    item_name: str
    quantity: int = Field(..., ge=1)
    unit_price: Decimal
    discount_rate: Decimal = Decimal("0")
    tax_rate: Decimal = Decimal("0")
    discount_amount: Decimal
    tax_amount: Decimal
    line_total: Decimal
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @model_validator(mode="after")
    def check_line_total(self) -> "SaleLineRecord":
        """line_total must equal gross - discount + tax."""
        gross = (self.unit_price * self.quantity).quantize(MONEY, rounding=ROUND_HALF_UP)
        expected = gross - self.discount_amount + self.tax_amount
        if self.line_total != expected:
            raise ValueError(
                f"line_total {self.line_total} does not match computed {expected}"
            )
        return self


class Invoice(BaseModel):
    """The invoice issued for exactly one sale."""

    id: int | None = None
    sale_id: int
    invoice_number: str
    issued_at: datetime
    status: InvoiceStatus = InvoiceStatus.ISSUED


class Sale(BaseModel):
    """Aggregate root: order totals, payment data, lines and invoice."""

    id: int | None = None
    staff_id: str
    customer_id: str | None = None

    sub_total_before_discount: Decimal
    total_product_discount: Decimal
    sub_total_after_product_discount: Decimal
    extra_discount_rate: Decimal = Decimal("0")
    extra_discount_amount: Decimal
    sub_total: Decimal = Field(..., ge=0)
    total_tax: Decimal
    grand_total: Decimal
    amount_paid: Decimal

    payment_method: PaymentMethod
    payment_status: PaymentStatus = PaymentStatus.PAID
    notes: str | None = None
    sale_date: date = Field(default_factory=date.today)

    lines: list[SaleLineRecord] = Field(default_factory=list)
    invoice: Invoice | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @model_validator(mode="after")
    def check_totals(self) -> "Sale":
        """grand_total must equal sub_total + total_tax."""
        if self.grand_total != self.sub_total + self.total_tax:
            raise ValueError(
                f"grand_total {self.grand_total} != "
                f"sub_total {self.sub_total} + total_tax {self.total_tax}"
            )
        return self

    @property
    def item_count(self) -> int:
        """Total units sold across all lines."""
        return sum(line.quantity for line in self.lines)
