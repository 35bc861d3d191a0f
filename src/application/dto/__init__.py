"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from src.application.dto.requests import (
    CreateStockItemRequest,
    RestockRequest,
    SaleCreateRequest,
    SaleLineRequest,
    parse_sale_request,
)
from src.application.dto.responses import (
    ComponentHealthResponse,
    ErrorResponse,
    HealthResponse,
    InvoiceResponse,
    SaleLineResponse,
    SaleListResponse,
    SaleResponse,
    StockItemListResponse,
    StockItemResponse,
)

__all__ = [
    # Requests
    "SaleLineRequest",
    "SaleCreateRequest",
    "parse_sale_request",
    "CreateStockItemRequest",
    "RestockRequest",
    # Responses
    "SaleResponse",
    "SaleLineResponse",
    "SaleListResponse",
    "InvoiceResponse",
    "StockItemResponse",
    "StockItemListResponse",
    "ComponentHealthResponse",
    "HealthResponse",
    "ErrorResponse",
]
