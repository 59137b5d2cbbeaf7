"""
Stock Import Service - receiving goods

Import lines always count towards stock: creating a line adds its
received_quantity to the ingredient, deleting it takes the quantity back.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import Dict, Any, List

from django.db import transaction
from django.db.models import Sum

from stock.models import StockImport, StockImportDetail, Supplier
from stock.services.base_service import (
    BaseService, success_response, paginate_queryset,
    ValidationError, NotFoundError, to_date
)
from stock.services.ledger_service import LedgerService
from stock.services.reconciliation import (
    LineCreate, LineReconciler, parse_line_edits, resolve_ingredients
)

logger = logging.getLogger(__name__)


class StockImportService(BaseService):
    model = StockImport

    QUANTITY_FIELDS = ("ordered_quantity", "received_quantity", "unit_price")
    LEDGER_FIELD = "received_quantity"

    # ==================== SERIALIZATION ====================

    @classmethod
    def serialize_detail(cls, detail: StockImportDetail) -> Dict[str, Any]:
        return {
            "id": detail.id,
            "ingredient_id": detail.ingredient_id,
            "ingredient": {
                "id": detail.ingredient.id,
                "name": detail.ingredient.name,
                "unit": detail.ingredient.unit,
            },
            "ordered_quantity": str(detail.ordered_quantity),
            "received_quantity": str(detail.received_quantity),
            "unit_price": str(detail.unit_price),
            "total_price": str(detail.total_price),
        }

    @classmethod
    def serialize(cls, stock_import: StockImport, include_details: bool = True) -> Dict[str, Any]:
        data = {
            "id": stock_import.id,
            "import_date": stock_import.import_date.isoformat(),
            "supplier_id": stock_import.supplier_id,
            "supplier": {
                "id": stock_import.supplier.id,
                "name": stock_import.supplier.name,
            } if stock_import.supplier else None,
            "total_amount": str(stock_import.total_amount),
            "created_by_id": stock_import.created_by_id,
            "updated_by_id": stock_import.updated_by_id,
            "created_at": stock_import.created_at.isoformat(),
            "updated_at": stock_import.updated_at.isoformat(),
        }

        if include_details:
            data["details"] = [
                cls.serialize_detail(detail)
                for detail in stock_import.details.select_related("ingredient")
            ]

        return data

    # ==================== LIST & GET ====================

    @classmethod
    def list(cls,
             page: int = 1,
             per_page: int = 20,
             date_from: date = None,
             date_to: date = None,
             supplier_id: int = None) -> Dict[str, Any]:
        queryset = cls.model.objects.select_related("supplier")

        if date_from:
            queryset = queryset.filter(import_date__gte=date_from)

        if date_to:
            queryset = queryset.filter(import_date__lte=date_to)

        if supplier_id:
            queryset = queryset.filter(supplier_id=supplier_id)

        queryset = queryset.order_by("-import_date", "-id")

        imports, pagination = paginate_queryset(queryset, page, per_page)

        return success_response({
            "stock_imports": [cls.serialize(i, include_details=False) for i in imports],
            "pagination": pagination,
        })

    @classmethod
    def get(cls, import_id: int) -> Dict[str, Any]:
        stock_import = cls.model.objects.select_related("supplier").filter(id=import_id).first()
        if not stock_import:
            raise NotFoundError("Stock import", import_id)

        return success_response({"stock_import": cls.serialize(stock_import)})

    # ==================== HELPERS ====================

    @classmethod
    def _resolve_supplier(cls, supplier_id):
        if not supplier_id:
            return None
        supplier = Supplier.objects.filter(id=supplier_id).first()
        if not supplier:
            raise NotFoundError("Supplier", supplier_id)
        return supplier

    @classmethod
    def _reconciler(cls, stock_import: StockImport, user_id: int = None) -> LineReconciler:
        return LineReconciler(
            document=stock_import,
            detail_model=StockImportDetail,
            parent_field="stock_import",
            quantity_field=cls.LEDGER_FIELD,
            sign=1,
            affects_stock=True,
            user_id=user_id,
        )

    @classmethod
    def _recalculate_total(cls, stock_import: StockImport) -> None:
        total = stock_import.details.aggregate(total=Sum("total_price"))["total"]
        stock_import.total_amount = total or Decimal("0")
        stock_import.save(update_fields=["total_amount", "updated_at"])

    # ==================== CREATE ====================

    @classmethod
    @transaction.atomic
    def create(cls,
               import_date: date,
               supplier_id: int = None,
               lines: List[Dict] = None,
               user_id: int = None) -> Dict[str, Any]:
        edits = parse_line_edits(lines, cls.QUANTITY_FIELDS, cls.LEDGER_FIELD)
        if any(not isinstance(edit, LineCreate) for edit in edits):
            raise ValidationError("A new import cannot reference existing lines", "lines")
        edits = resolve_ingredients(edits)

        stock_import = cls.model.objects.create(
            import_date=to_date(import_date, "import_date"),
            supplier=cls._resolve_supplier(supplier_id),
            created_by_id=user_id,
            updated_by_id=user_id,
        )

        cls._reconciler(stock_import, user_id).apply(edits)
        cls._recalculate_total(stock_import)

        logger.info(
            f"Stock import created: {stock_import.id} with {len(edits)} lines, "
            f"total {stock_import.total_amount}, by user {user_id}"
        )

        return success_response(
            {"stock_import": cls.serialize(cls.get_or_404(stock_import.id))},
            "Stock import created"
        )

    # ==================== UPDATE ====================

    @classmethod
    @transaction.atomic
    def update(cls,
               import_id: int,
               user_id: int = None,
               lines: List[Dict] = None,
               **kwargs) -> Dict[str, Any]:
        stock_import = cls.get_for_update(import_id)

        edits = None
        if lines is not None:
            edits = resolve_ingredients(
                parse_line_edits(lines, cls.QUANTITY_FIELDS, cls.LEDGER_FIELD)
            )

        update_fields = ["updated_at", "updated_by"]

        if "import_date" in kwargs:
            stock_import.import_date = to_date(kwargs["import_date"], "import_date")
            update_fields.append("import_date")

        if "supplier_id" in kwargs:
            stock_import.supplier = cls._resolve_supplier(kwargs["supplier_id"])
            update_fields.append("supplier")

        stock_import.updated_by_id = user_id
        stock_import.save(update_fields=update_fields)

        if edits is not None:
            cls._reconciler(stock_import, user_id).apply(edits)
            cls._recalculate_total(stock_import)

        logger.info(
            f"Stock import updated: {stock_import.id} "
            f"({len(edits) if edits is not None else 0} line edits) by user {user_id}"
        )

        return success_response(
            {"stock_import": cls.serialize(cls.get_or_404(stock_import.id))},
            "Stock import updated"
        )

    # ==================== DELETE ====================

    @classmethod
    @transaction.atomic
    def delete(cls, import_id: int, user_id: int = None) -> Dict[str, Any]:
        stock_import = cls.get_for_update(import_id)

        for detail in stock_import.details.all():
            LedgerService.decrement(detail.ingredient_id, detail.received_quantity)

        stock_import.delete()

        logger.info(f"Stock import deleted: {import_id} by user {user_id}")

        return success_response({"id": import_id}, "Stock import deleted")
