"""
Sale pricing calculator.

Pure functions over Decimal inputs; nothing here reads the clock, the store
or the settings, so identical inputs always give identical outputs.

Rounding rule: every per-line amount (gross, discount, tax) and the order
extra discount is quantized to the currency minor unit (0.01) with
ROUND_HALF_UP before it is summed. Tax is charged on the post-discount
gross of the line. The order-level extra discount applies to the subtotal
after line discounts and never reduces tax.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from src.core.exceptions import ValidationError

MONEY = Decimal("0.01")
ZERO = Decimal("0.00")
ONE = Decimal("1")


def round_money(value: Decimal) -> Decimal:
    """
    Quantize an amount to the currency minor unit.

    Raises:
        ValidationError: if the amount has more digits than the decimal
            context can hold at two places
    """
    try:
        return value.quantize(MONEY, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValidationError("amount", "too large to price", value) from e


def _check_rate(name: str, rate: Decimal) -> Decimal:
    if rate < 0 or rate > ONE:
        raise ValidationError(name, "must be a fraction between 0 and 1", rate)
    return rate


def _check_line(unit_price: Decimal, quantity: int) -> None:
    if unit_price < 0:
        raise ValidationError("unit_price", "must not be negative", unit_price)
    if quantity < 1:
        raise ValidationError("quantity", "must be at least 1", quantity)


def line_gross(unit_price: Decimal, quantity: int) -> Decimal:
    """unit_price x quantity."""
    _check_line(unit_price, quantity)
    return round_money(unit_price * quantity)


def line_discount(unit_price: Decimal, quantity: int, discount_rate: Decimal) -> Decimal:
    """unit_price x quantity x discount_rate."""
    _check_rate("discount_rate", discount_rate)
    return round_money(line_gross(unit_price, quantity) * discount_rate)


def line_tax(
    unit_price: Decimal,
    quantity: int,
    discount_rate: Decimal,
    tax_rate: Decimal,
) -> Decimal:
    """Tax on the post-discount gross of the line."""
    _check_rate("tax_rate", tax_rate)
    net = line_gross(unit_price, quantity) - line_discount(unit_price, quantity, discount_rate)
    return round_money(net * tax_rate)


def line_total(
    unit_price: Decimal,
    quantity: int,
    discount_rate: Decimal,
    tax_rate: Decimal,
) -> Decimal:
    """(gross - discount) + tax."""
    return price_line(unit_price, quantity, discount_rate, tax_rate).total


@dataclass(frozen=True)
class LinePricing:
    """All amounts for one priced line."""

    unit_price: Decimal
    quantity: int
    discount_rate: Decimal
    tax_rate: Decimal
    gross: Decimal
    discount: Decimal
    tax: Decimal

    @property
    def net(self) -> Decimal:
        """Gross after the line discount, before tax."""
        return self.gross - self.discount

    @property
    def total(self) -> Decimal:
        return self.net + self.tax


def price_line(
    unit_price: Decimal,
    quantity: int,
    discount_rate: Decimal = ZERO,
    tax_rate: Decimal = ZERO,
) -> LinePricing:
    """Price one line: gross, discount, tax on the discounted amount."""
    return LinePricing(
        unit_price=unit_price,
        quantity=quantity,
        discount_rate=discount_rate,
        tax_rate=tax_rate,
        gross=line_gross(unit_price, quantity),
        discount=line_discount(unit_price, quantity, discount_rate),
        tax=line_tax(unit_price, quantity, discount_rate, tax_rate),
    )


@dataclass(frozen=True)
class OrderTotals:
    """Order-level aggregates of a sale."""

    sub_total_before_discount: Decimal
    total_product_discount: Decimal
    sub_total_after_product_discount: Decimal
    extra_discount_amount: Decimal
    sub_total: Decimal
    total_tax: Decimal
    grand_total: Decimal


def order_aggregate(
    lines: Iterable[LinePricing],
    extra_discount_rate: Decimal = ZERO,
) -> OrderTotals:
    """
    Aggregate priced lines into order totals.

    An empty iterable yields all-zero totals.
    """
    _check_rate("extra_discount_rate", extra_discount_rate)

    lines = list(lines)
    before_discount = sum((line.gross for line in lines), ZERO)
    product_discount = sum((line.discount for line in lines), ZERO)
    total_tax = sum((line.tax for line in lines), ZERO)

    after_product_discount = before_discount - product_discount
    extra_discount = round_money(after_product_discount * extra_discount_rate)
    sub_total = after_product_discount - extra_discount

    return OrderTotals(
        sub_total_before_discount=before_discount,
        total_product_discount=product_discount,
        sub_total_after_product_discount=after_product_discount,
        extra_discount_amount=extra_discount,
        sub_total=sub_total,
        total_tax=total_tax,
        grand_total=sub_total + total_tax,
    )
