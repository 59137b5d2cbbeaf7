"""
Stock Services - ingredient stock ledger business logic

Usage:
    from stock.services import StockImportService, StockExportService

    # Receive goods
    result = StockImportService.create(import_date="2025-01-10", lines=[
        {"ingredient_id": 1, "ordered_quantity": 50, "received_quantity": 50, "unit_price": 2},
    ])

    # Issue goods
    StockExportService.set_status(export_id=3, status=StockExport.Status.COMPLETED)
"""

# Base utilities
from stock.services.base_service import (
    ServiceError,
    ValidationError,
    NotFoundError,
    BusinessRuleError,
    InsufficientStockError,
    success_response,
    paginate_queryset,
    to_decimal,
    to_quantity,
    to_date,
    BaseService,
)

# Ledger
from .ledger_service import LedgerService
from .reconciliation import (
    LineCreate,
    LineUpdate,
    LineDelete,
    LineReconciler,
    parse_line_edits,
    resolve_ingredients,
)

# Documents
from .ingredient_service import IngredientService
from .import_service import StockImportService
from .export_service import StockExportService
from .loss_service import StockLossService


__all__ = [
    # Errors
    "ServiceError",
    "ValidationError",
    "NotFoundError",
    "BusinessRuleError",
    "InsufficientStockError",

    # Helpers
    "success_response",
    "paginate_queryset",
    "to_decimal",
    "to_quantity",
    "to_date",
    "BaseService",

    # Ledger
    "LedgerService",
    "LineCreate",
    "LineUpdate",
    "LineDelete",
    "LineReconciler",
    "parse_line_edits",
    "resolve_ingredients",

    # Services
    "IngredientService",
    "StockImportService",
    "StockExportService",
    "StockLossService",
]
