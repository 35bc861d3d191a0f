"""Sales endpoints."""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import get_process_sale_use_case, get_sales_store, get_staff_id
from src.application.dto.requests import SaleCreateRequest
from src.application.dto.responses import ErrorResponse, SaleListResponse, SaleResponse
from src.application.use_cases.process_sale import ProcessSaleUseCase
from src.core.entities.sale import SalePeriod
from src.core.exceptions import SaleNotFoundError
from src.core.interfaces.sales_store import ISalesStore

router = APIRouter(prefix="/api/sales", tags=["sales"])


@router.post(
    "",
    response_model=SaleResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def create_sale(
    request: SaleCreateRequest,
    staff_id: str = Depends(get_staff_id),
    use_case: ProcessSaleUseCase = Depends(get_process_sale_use_case),
) -> SaleResponse:
    """Process a sale: check stock, price lines, decrement stock, issue the invoice."""
    sale = await use_case.execute(request, staff_id=staff_id)
    return use_case.to_response(sale)


@router.get("", response_model=SaleListResponse)
async def list_sales(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    page: int | None = Query(None, ge=1, description="1-based page; overrides offset"),
    period: SalePeriod | None = Query(None, description="Sale date window"),
    search: str | None = Query(
        None, max_length=100, description="Invoice number, customer or staff ID"
    ),
    store: ISalesStore = Depends(get_sales_store),
) -> SaleListResponse:
    """List sales, newest first, optionally filtered by period and search text."""
    if page is not None:
        offset = (page - 1) * limit
    sales = await store.list_sales(limit=limit, offset=offset, period=period, search=search)
    total = await store.count_sales(period=period, search=search)
    return SaleListResponse(
        sales=[SaleResponse.from_entity(s) for s in sales],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/invoices/{invoice_number}",
    response_model=SaleResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_sale_by_invoice(
    invoice_number: str,
    store: ISalesStore = Depends(get_sales_store),
) -> SaleResponse:
    """Get the sale documented by an invoice number."""
    sale = await store.get_sale_by_invoice_number(invoice_number)
    if sale is None:
        raise SaleNotFoundError(invoice_number)
    return SaleResponse.from_entity(sale)


@router.get(
    "/{sale_id}",
    response_model=SaleResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_sale(
    sale_id: int,
    store: ISalesStore = Depends(get_sales_store),
) -> SaleResponse:
    """Get a sale by ID."""
    sale = await store.get_sale(sale_id)
    if sale is None:
        raise SaleNotFoundError(sale_id)
    return SaleResponse.from_entity(sale)
