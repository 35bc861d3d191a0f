"""Inventory management endpoints."""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import get_inventory_store, get_restock_item_use_case
from src.application.dto.requests import CreateStockItemRequest, RestockRequest
from src.application.dto.responses import (
    ErrorResponse,
    StockItemListResponse,
    StockItemResponse,
)
from src.application.use_cases.restock_item import RestockItemUseCase
from src.core.entities.stock_item import StockItem
from src.core.exceptions import ItemNotFoundError
from src.core.interfaces.inventory_store import IInventoryStore

router = APIRouter(prefix="/api/inventory", tags=["inventory"])


@router.post(
    "/items",
    response_model=StockItemResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_stock_item(
    request: CreateStockItemRequest,
    store: IInventoryStore = Depends(get_inventory_store),
) -> StockItemResponse:
    """Add a sellable item with its opening stock."""
    item = await store.create_item(StockItem(**request.model_dump()))
    return StockItemResponse.from_entity(item)


@router.get("/items", response_model=StockItemListResponse)
async def list_stock_items(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    store: IInventoryStore = Depends(get_inventory_store),
) -> StockItemListResponse:
    """List stock items with current quantity on hand."""
    items = await store.list_items(limit=limit, offset=offset)
    return StockItemListResponse(
        items=[StockItemResponse.from_entity(i) for i in items],
        limit=limit,
        offset=offset,
    )


@router.get(
    "/items/{item_id}",
    response_model=StockItemResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_stock_item(
    item_id: int,
    store: IInventoryStore = Depends(get_inventory_store),
) -> StockItemResponse:
    """Get a stock item by ID."""
    item = await store.get_item(item_id)
    if item is None:
        raise ItemNotFoundError(item_id)
    return StockItemResponse.from_entity(item)


@router.post(
    "/items/{item_id}/restock",
    response_model=StockItemResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def restock_item(
    item_id: int,
    request: RestockRequest,
    use_case: RestockItemUseCase = Depends(get_restock_item_use_case),
) -> StockItemResponse:
    """Add received units to an item's stock."""
    item = await use_case.execute(item_id, request)
    return use_case.to_response(item)
