"""
Domain exceptions for the pharmacy sales service.

Every error raised by sale processing carries a machine-readable code and a
details dict so the HTTP layer can render it without string matching.
"""

from typing import Any


class PharmacyError(Exception):
    """Base exception for all pharmacy service errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Validation Exceptions
class ValidationError(PharmacyError):
    """Input validation failed before any store access."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


# Sale Exceptions
class SaleError(PharmacyError):
    """Base exception for sale processing failures."""

    pass


class ItemNotFoundError(SaleError):
    """A referenced stock item does not exist."""

    def __init__(self, item_id: int, line_index: int | None = None):
        super().__init__(
            f"Stock item not found: {item_id}",
            code="ITEM_NOT_FOUND",
            details={"item_id": item_id, "line_index": line_index},
        )
        self.item_id = item_id
        self.line_index = line_index


class InsufficientStockError(SaleError):
    """Requested quantity exceeds the quantity on hand."""

    def __init__(
        self,
        item_id: int,
        available: int,
        requested: int,
        line_index: int | None = None,
    ):
        super().__init__(
            f"Insufficient stock for item {item_id}: "
            f"available {available}, requested {requested}",
            code="INSUFFICIENT_STOCK",
            details={
                "item_id": item_id,
                "available": available,
                "requested": requested,
                "line_index": line_index,
            },
        )
        self.item_id = item_id
        self.available = available
        self.requested = requested
        self.line_index = line_index


class SaleNotFoundError(SaleError):
    """Sale not found in storage."""

    def __init__(self, sale_ref: int | str):
        super().__init__(
            f"Sale not found: {sale_ref}",
            code="SALE_NOT_FOUND",
            details={"sale_ref": sale_ref},
        )


# Storage Exceptions
class StorageError(PharmacyError):
    """Base exception for storage operations."""

    pass


class TransactionError(StorageError):
    """Base for transient transaction failures; the whole call may be retried."""

    retryable = True


class TransactionTimeoutError(TransactionError):
    """The store lock could not be acquired within the configured timeout."""

    def __init__(self, operation: str, timeout: float):
        super().__init__(
            f"Transaction timed out during {operation} after {timeout}",
            code="TRANSACTION_TIMEOUT",
            details={"operation": operation, "timeout": timeout},
        )


class TransactionConflictError(TransactionError):
    """The store could not serialize the transaction against a concurrent one."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Transaction conflict during {operation}: {error}",
            code="TRANSACTION_CONFLICT",
            details={"operation": operation, "error": error},
        )


class PersistenceError(StorageError):
    """Any other storage-layer fault. Nothing from the transaction is visible."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Persistence failure during {operation}: {error}",
            code="PERSISTENCE_FAILURE",
            details={"operation": operation, "error": error},
        )


class ConfigurationError(PharmacyError):
    """Configuration error."""

    pass
