"""SQLite implementation of sale storage and the sale unit of work."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date, datetime
from decimal import Decimal

import aiosqlite

from src.config import get_logger
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
from src.core.exceptions import InsufficientStockError, ItemNotFoundError
from src.core.interfaces.sales_store import ISalesStore, ISaleUnitOfWork
from src.infrastructure.storage.sqlite.connection import ConnectionPool
from src.infrastructure.storage.sqlite.inventory_store import row_to_stock_item

logger = get_logger(__name__)


def _dec(value: Decimal | None) -> str | None:
    return None if value is None else str(value)


def _parse_datetime(value: str | None) -> datetime:
    if value:
        try:
            return datetime.fromisoformat(value)
        except (ValueError, TypeError):
            pass
    return datetime.utcnow()


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _sale_filters(
    period: SalePeriod | None, search: str | None
) -> tuple[str, list[str]]:
    """WHERE clause over `sales s` joined to `invoices i`, with its parameters."""
    clauses: list[str] = []
    params: list[str] = []

    date_range = period.date_range() if period else None
    if date_range:
        clauses.append("s.sale_date >= ? AND s.sale_date < ?")
        params.extend(d.isoformat() for d in date_range)

    if search and search.strip():
        pattern = f"%{_escape_like(search.strip())}%"
        clauses.append(
            "(i.invoice_number LIKE ? ESCAPE '\\'"
            " OR s.customer_id LIKE ? ESCAPE '\\'"
            " OR s.staff_id LIKE ? ESCAPE '\\')"
        )
        params.extend([pattern] * 3)

    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    return where, params


class SQLiteSaleUnitOfWork(ISaleUnitOfWork):
    """Sale unit of work bound to one connection inside BEGIN IMMEDIATE."""

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def get_stock_item(self, item_id: int) -> StockItem | None:
        cursor = await self._conn.execute(
            "SELECT * FROM stock_items WHERE id = ?", (item_id,)
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return row_to_stock_item(row)

    async def decrement_stock(self, item_id: int, quantity: int) -> StockItem:
        cursor = await self._conn.execute(
            """
            UPDATE stock_items
            SET quantity_on_hand = quantity_on_hand - ?, updated_at = ?
            WHERE id = ? AND quantity_on_hand >= ?
            """,
            (quantity, datetime.utcnow().isoformat(), item_id, quantity),
        )
        if cursor.rowcount == 0:
            item = await self.get_stock_item(item_id)
            if item is None:
                raise ItemNotFoundError(item_id)
            raise InsufficientStockError(item_id, item.quantity_on_hand, quantity)

        item = await self.get_stock_item(item_id)
        logger.debug(
            "stock_decremented",
            item_id=item_id,
            quantity=quantity,
            remaining=item.quantity_on_hand,
        )
        return item

    async def add_sale(self, sale: Sale) -> Sale:
        sale.created_at = datetime.utcnow()
        cursor = await self._conn.execute(
            """
            INSERT INTO sales (
                staff_id, customer_id,
                sub_total_before_discount, total_product_discount,
                sub_total_after_product_discount, extra_discount_rate,
                extra_discount_amount, sub_total, total_tax, grand_total,
                amount_paid, payment_method, payment_status,
                notes, sale_date, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                sale.staff_id,
                sale.customer_id,
                _dec(sale.sub_total_before_discount),
                _dec(sale.total_product_discount),
                _dec(sale.sub_total_after_product_discount),
                _dec(sale.extra_discount_rate),
                _dec(sale.extra_discount_amount),
                _dec(sale.sub_total),
                _dec(sale.total_tax),
                _dec(sale.grand_total),
                _dec(sale.amount_paid),
                sale.payment_method.value,
                sale.payment_status.value,
                sale.notes,
                sale.sale_date.isoformat(),
                sale.created_at.isoformat(),
            ),
        )
        sale.id = cursor.lastrowid

        for line in sale.lines:
            line.sale_id = sale.id
            line.created_at = sale.created_at
            line_cursor = await self._conn.execute(
                """
                INSERT INTO sale_lines (
                    sale_id, item_id, item_name, quantity, unit_price,
                    discount_rate, tax_rate, discount_amount, tax_amount,
                    line_total, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    line.sale_id,
                    line.item_id,
                    line.item_name,
                    line.quantity,
                    _dec(line.unit_price),
                    _dec(line.discount_rate),
                    _dec(line.tax_rate),
                    _dec(line.discount_amount),
                    _dec(line.tax_amount),
                    _dec(line.line_total),
                    line.created_at.isoformat(),
                ),
            )
            line.id = line_cursor.lastrowid

        return sale

    async def add_invoice(self, invoice: Invoice) -> Invoice:
        cursor = await self._conn.execute(
            """
            INSERT INTO invoices (sale_id, invoice_number, issued_at, status)
            VALUES (?, ?, ?, ?)
            """,
            (
                invoice.sale_id,
                invoice.invoice_number,
                invoice.issued_at.isoformat(),
                invoice.status.value,
            ),
        )
        invoice.id = cursor.lastrowid
        return invoice


class SQLiteSalesStore(ISalesStore):
    """SQLite implementation of sale storage."""

    def __init__(self, pool: ConnectionPool):
        self._pool = pool

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[SQLiteSaleUnitOfWork]:
        try:
            async with self._pool.transaction() as conn:
                yield SQLiteSaleUnitOfWork(conn)
        except Exception as e:
            logger.info("unit_of_work_rolled_back", error_type=type(e).__name__)
            raise

    async def get_sale(self, sale_id: int) -> Sale | None:
        """Get sale by ID with lines and invoice."""
        async with self._pool.acquire() as conn:
            cursor = await conn.execute("SELECT * FROM sales WHERE id = ?", (sale_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return await self._load_sale(conn, row)

    async def get_sale_by_invoice_number(self, invoice_number: str) -> Sale | None:
        """Get the sale documented by an invoice number."""
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                """
                SELECT s.* FROM sales s
                JOIN invoices i ON i.sale_id = s.id
                WHERE i.invoice_number = ?
                """,
                (invoice_number,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return await self._load_sale(conn, row)

    async def list_sales(
        self,
        limit: int = 100,
        offset: int = 0,
        period: SalePeriod | None = None,
        search: str | None = None,
    ) -> list[Sale]:
        """List sales, newest first."""
        where, params = _sale_filters(period, search)
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                f"""
                SELECT s.* FROM sales s
                LEFT JOIN invoices i ON i.sale_id = s.id
                {where}
                ORDER BY s.id DESC
                LIMIT ? OFFSET ?
                """,
                (*params, limit, offset),
            )
            rows = await cursor.fetchall()
            return [await self._load_sale(conn, row) for row in rows]

    async def count_sales(
        self,
        period: SalePeriod | None = None,
        search: str | None = None,
    ) -> int:
        where, params = _sale_filters(period, search)
        async with self._pool.acquire() as conn:
            cursor = await conn.execute(
                f"""
                SELECT COUNT(*) FROM sales s
                LEFT JOIN invoices i ON i.sale_id = s.id
                {where}
                """,
                params,
            )
            row = await cursor.fetchone()
            return row[0]

    async def _load_sale(self, conn: aiosqlite.Connection, row: aiosqlite.Row) -> Sale:
        lines_cursor = await conn.execute(
            "SELECT * FROM sale_lines WHERE sale_id = ? ORDER BY id",
            (row["id"],),
        )
        lines = [self._row_to_line(r) for r in await lines_cursor.fetchall()]

        invoice_cursor = await conn.execute(
            "SELECT * FROM invoices WHERE sale_id = ?", (row["id"],)
        )
        invoice_row = await invoice_cursor.fetchone()
        invoice = self._row_to_invoice(invoice_row) if invoice_row else None

        return self._row_to_sale(row, lines, invoice)

    @staticmethod
    def _row_to_sale(
        row: aiosqlite.Row,
        lines: list[SaleLineRecord],
        invoice: Invoice | None,
    ) -> Sale:
        """Convert a database row to a Sale entity."""
        return Sale(
            id=row["id"],
            staff_id=row["staff_id"],
            customer_id=row["customer_id"],
            sub_total_before_discount=Decimal(row["sub_total_before_discount"]),
            total_product_discount=Decimal(row["total_product_discount"]),
            sub_total_after_product_discount=Decimal(row["sub_total_after_product_discount"]),
            extra_discount_rate=Decimal(row["extra_discount_rate"]),
            extra_discount_amount=Decimal(row["extra_discount_amount"]),
            sub_total=Decimal(row["sub_total"]),
            total_tax=Decimal(row["total_tax"]),
            grand_total=Decimal(row["grand_total"]),
            amount_paid=Decimal(row["amount_paid"]),
            payment_method=PaymentMethod(row["payment_method"]),
            payment_status=PaymentStatus(row["payment_status"]),
            notes=row["notes"],
            sale_date=date.fromisoformat(row["sale_date"]),
            lines=lines,
            invoice=invoice,
            created_at=_parse_datetime(row["created_at"]),
        )

    @staticmethod
    def _row_to_line(row: aiosqlite.Row) -> SaleLineRecord:
        """Convert a database row to a SaleLineRecord entity."""
        return SaleLineRecord(
            id=row["id"],
            sale_id=row["sale_id"],
            item_id=row["item_id"],
            item_name=row["item_name"],
            quantity=row["quantity"],
            unit_price=Decimal(row["unit_price"]),
            discount_rate=Decimal(row["discount_rate"]),
            tax_rate=Decimal(row["tax_rate"]),
            discount_amount=Decimal(row["discount_amount"]),
            tax_amount=Decimal(row["tax_amount"]),
            line_total=Decimal(row["line_total"]),
            created_at=_parse_datetime(row["created_at"]),
        )

    @staticmethod
    def _row_to_invoice(row: aiosqlite.Row) -> Invoice:
        """Convert a database row to an Invoice entity."""
        return Invoice(
            id=row["id"],
            sale_id=row["sale_id"],
            invoice_number=row["invoice_number"],
            issued_at=_parse_datetime(row["issued_at"]),
            status=InvoiceStatus(row["status"]),
        )
