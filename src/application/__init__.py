"""
Application layer - Use cases and DTOs.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services and stores

Use cases are the only entry point for API handlers.
"""

from src.application.dto.requests import (
    CreateStockItemRequest,
    RestockRequest,
    SaleCreateRequest,
    SaleLineRequest,
    parse_sale_request,
)
from src.application.dto.responses import (
    ErrorResponse,
    HealthResponse,
    SaleListResponse,
    SaleResponse,
    StockItemResponse,
)
from src.application.use_cases import ProcessSaleUseCase, RestockItemUseCase

__all__ = [
    # Request DTOs
    "SaleLineRequest",
    "SaleCreateRequest",
    "parse_sale_request",
    "CreateStockItemRequest",
    "RestockRequest",
    # Response DTOs
    "SaleResponse",
    "SaleListResponse",
    "StockItemResponse",
    "HealthResponse",
    "ErrorResponse",
    # Use cases
    "ProcessSaleUseCase",
    "RestockItemUseCase",
]
