"""Application use cases."""

from src.application.use_cases.process_sale import ProcessSaleUseCase
from src.application.use_cases.restock_item import RestockItemUseCase

__all__ = [
    "ProcessSaleUseCase",
    "RestockItemUseCase",
]
