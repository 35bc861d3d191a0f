"""Process Sale Use Case: check stock, price, decrement and persist atomically."""

from datetime import date, datetime

from src.application.dto.requests import SaleCreateRequest, SaleLineRequest
from src.application.dto.responses import SaleResponse
from src.config import get_logger
from src.core.entities.sale import Invoice, InvoiceStatus, PaymentStatus, Sale, SaleLineRecord
from src.core.entities.stock_item import StockItem
from src.core.exceptions import InsufficientStockError, ItemNotFoundError, PharmacyError
from src.core.interfaces.sales_store import ISalesStore, ISaleUnitOfWork
from src.core.services.invoice_numbering import (
    InvoiceNumberingStrategy,
    SaleIdInvoiceNumbering,
)
from src.core.services.pricing import ZERO, LinePricing, order_aggregate, price_line

logger = get_logger(__name__)


class ProcessSaleUseCase:
    """
    Turn a cart into a persisted Sale with its lines and invoice.

    Everything runs in one unit of work: either the stock decrements, the
    sale, its lines and the invoice are all committed, or nothing is.
    """

    def __init__(
        self,
        sales_store: ISalesStore,
        invoice_numbering: InvoiceNumberingStrategy | None = None,
    ):
        self._sales_store = sales_store
        self._invoice_numbering = invoice_numbering or SaleIdInvoiceNumbering()

    async def execute(self, request: SaleCreateRequest, staff_id: str) -> Sale:
        """
        Process a sale.

        Args:
            request: Validated sale request
            staff_id: Identity of the staff member ringing up the sale

        Returns:
            The committed Sale with ids, lines and invoice populated

        Raises:
            ItemNotFoundError: A line references an unknown item
            InsufficientStockError: A line asks for more than is on hand
            TransactionError: Lock timeout or conflict; safe to retry
            PersistenceError: Any other storage failure
        """
        logger.info(
            "sale_processing_started",
            staff_id=staff_id,
            lines=len(request.lines),
            payment_method=request.payment_method.value,
        )

        try:
            async with self._sales_store.unit_of_work() as uow:
                records: list[SaleLineRecord] = []
                pricings: list[LinePricing] = []

                for index, line in enumerate(request.lines):
                    item = await self._reserve_line(uow, index, line)
                    pricing = self._price(item, line)
                    pricings.append(pricing)
                    records.append(
                        SaleLineRecord(
                            item_id=item.id,
                            item_name=item.name,
                            quantity=line.quantity,
                            unit_price=item.price,
                            discount_rate=pricing.discount_rate,
                            tax_rate=pricing.tax_rate,
                            discount_amount=pricing.discount,
                            tax_amount=pricing.tax,
                            line_total=pricing.total,
                        )
                    )

                totals = order_aggregate(pricings, request.extra_discount_rate)
                sale = Sale(
                    staff_id=staff_id,
                    customer_id=request.customer_id,
                    sub_total_before_discount=totals.sub_total_before_discount,
                    total_product_discount=totals.total_product_discount,
                    sub_total_after_product_discount=totals.sub_total_after_product_discount,
                    extra_discount_rate=request.extra_discount_rate,
                    extra_discount_amount=totals.extra_discount_amount,
                    sub_total=totals.sub_total,
                    total_tax=totals.total_tax,
                    grand_total=totals.grand_total,
                    amount_paid=totals.grand_total,
                    payment_method=request.payment_method,
                    payment_status=PaymentStatus.PAID,
                    notes=request.notes,
                    sale_date=date.today(),
                    lines=records,
                )
                sale = await uow.add_sale(sale)

                issued_at = datetime.utcnow()
                invoice = Invoice(
                    sale_id=sale.id,
                    invoice_number=self._invoice_numbering.generate(sale.id, issued_at),
                    issued_at=issued_at,
                    status=InvoiceStatus.ISSUED,
                )
                sale.invoice = await uow.add_invoice(invoice)

        except PharmacyError as e:
            logger.warning(
                "sale_aborted",
                staff_id=staff_id,
                error_code=e.code,
                details=e.details,
            )
            raise

        logger.info(
            "sale_processed",
            sale_id=sale.id,
            invoice_number=sale.invoice.invoice_number,
            grand_total=sale.grand_total,
            item_count=sale.item_count,
        )
        return sale

    async def _reserve_line(
        self, uow: ISaleUnitOfWork, index: int, line: SaleLineRequest
    ) -> StockItem:
        """Check and decrement stock for one line; errors name the line."""
        item = await uow.get_stock_item(line.item_id)
        if item is None:
            raise ItemNotFoundError(line.item_id, line_index=index)
        if not item.has_stock_for(line.quantity):
            raise InsufficientStockError(
                line.item_id, item.quantity_on_hand, line.quantity, line_index=index
            )

        try:
            await uow.decrement_stock(line.item_id, line.quantity)
        except InsufficientStockError as e:
            raise InsufficientStockError(
                e.item_id, e.available, e.requested, line_index=index
            ) from e
        except ItemNotFoundError as e:
            raise ItemNotFoundError(e.item_id, line_index=index) from e
        return item

    @staticmethod
    def _price(item: StockItem, line: SaleLineRequest) -> LinePricing:
        """Price a line at the item's snapshotted price; request overrides win."""
        discount_rate = line.discount_override
        if discount_rate is None:
            discount_rate = item.discount_rate if item.discount_rate is not None else ZERO
        tax_rate = line.tax_override
        if tax_rate is None:
            tax_rate = item.tax_rate if item.tax_rate is not None else ZERO
        return price_line(item.price, line.quantity, discount_rate, tax_rate)

    def to_response(self, sale: Sale) -> SaleResponse:
        """Convert result to API response."""
        return SaleResponse.from_entity(sale)
