"""
Stock Export Service - issuing goods

An export's lines affect stock only while the export is Completed.
Moving into Completed checks availability for every line and then
deducts; moving out of Completed puts everything back.
"""
import logging
from datetime import date
from typing import Dict, Any, List

from django.db import transaction

from stock.models import StockExport, StockExportDetail
from stock.services.base_service import (
    BaseService, success_response, paginate_queryset,
    ValidationError, NotFoundError, BusinessRuleError, InsufficientStockError, to_date
)
from stock.services.ledger_service import LedgerService
from stock.services.reconciliation import (
    LineCreate, LineReconciler, parse_line_edits, resolve_ingredients
)

logger = logging.getLogger(__name__)

Status = StockExport.Status


class StockExportService(BaseService):
    model = StockExport

    QUANTITY_FIELDS = ("quantity",)
    LEDGER_FIELD = "quantity"

    # Every status may move to every other status
    TRANSITIONS = {
        Status.DRAFT: {Status.APPROVED, Status.COMPLETED},
        Status.APPROVED: {Status.DRAFT, Status.COMPLETED},
        Status.COMPLETED: {Status.DRAFT, Status.APPROVED},
    }

    # ==================== SERIALIZATION ====================

    @classmethod
    def serialize_detail(cls, detail: StockExportDetail) -> Dict[str, Any]:
        return {
            "id": detail.id,
            "ingredient_id": detail.ingredient_id,
            "ingredient": {
                "id": detail.ingredient.id,
                "name": detail.ingredient.name,
                "unit": detail.ingredient.unit,
            },
            "quantity": str(detail.quantity),
        }

    @classmethod
    def serialize(cls, export: StockExport, include_details: bool = True) -> Dict[str, Any]:
        data = {
            "id": export.id,
            "export_date": export.export_date.isoformat(),
            "purpose": export.purpose,
            "status": export.status,
            "status_label": export.status_label,
            "created_by_id": export.created_by_id,
            "updated_by_id": export.updated_by_id,
            "created_at": export.created_at.isoformat(),
            "updated_at": export.updated_at.isoformat(),
        }

        if include_details:
            data["details"] = [
                cls.serialize_detail(detail)
                for detail in export.details.select_related("ingredient")
            ]

        return data

    # ==================== LIST & GET ====================

    @classmethod
    def list(cls,
             page: int = 1,
             per_page: int = 20,
             date_from: date = None,
             date_to: date = None,
             status: int = None) -> Dict[str, Any]:
        queryset = cls.model.objects.all()

        if date_from:
            queryset = queryset.filter(export_date__gte=date_from)

        if date_to:
            queryset = queryset.filter(export_date__lte=date_to)

        if status is not None:
            queryset = queryset.filter(status=cls._parse_status(status))

        queryset = queryset.order_by("-export_date", "-id")

        exports, pagination = paginate_queryset(queryset, page, per_page)

        return success_response({
            "stock_exports": [cls.serialize(e, include_details=False) for e in exports],
            "pagination": pagination,
            "statuses": [{"value": c[0], "label": c[1]} for c in Status.choices],
        })

    @classmethod
    def get(cls, export_id: int) -> Dict[str, Any]:
        export = cls.model.objects.filter(id=export_id).first()
        if not export:
            raise NotFoundError("Stock export", export_id)

        return success_response({"stock_export": cls.serialize(export)})

    # ==================== STATE MACHINE ====================

    @classmethod
    def _parse_status(cls, value) -> Status:
        try:
            return Status(int(value))
        except (TypeError, ValueError):
            valid = [c[0] for c in Status.choices]
            raise ValidationError(f"Invalid status. Valid: {valid}", "status")

    @classmethod
    def _transition(cls, export: StockExport, new_status: Status) -> None:
        """Apply the stock effect of moving export to new_status, then set it."""
        old_status = Status(export.status)
        if new_status == old_status:
            return

        if new_status not in cls.TRANSITIONS[old_status]:
            raise BusinessRuleError(
                f"Cannot change export status from {old_status.label} to {new_status.label}",
                "export_status_transition"
            )

        details = list(export.details.all())

        if new_status == Status.COMPLETED:
            try:
                LedgerService.ensure_sufficient(
                    (detail.ingredient_id, detail.quantity) for detail in details
                )
            except InsufficientStockError as e:
                logger.error(f"Stock export {export.id} cannot be completed: {e}")
                raise
            for detail in details:
                LedgerService.decrement(detail.ingredient_id, detail.quantity)

        elif old_status == Status.COMPLETED:
            for detail in details:
                LedgerService.increment(detail.ingredient_id, detail.quantity)

        export.status = new_status

    @classmethod
    def _reconciler(cls, export: StockExport, user_id: int = None) -> LineReconciler:
        return LineReconciler(
            document=export,
            detail_model=StockExportDetail,
            parent_field="stock_export",
            quantity_field=cls.LEDGER_FIELD,
            sign=-1,
            affects_stock=export.is_completed,
            user_id=user_id,
        )

    # ==================== CREATE ====================

    @classmethod
    @transaction.atomic
    def create(cls,
               export_date: date,
               purpose: str = "",
               status: int = Status.DRAFT,
               lines: List[Dict] = None,
               user_id: int = None) -> Dict[str, Any]:
        status = cls._parse_status(status)

        edits = parse_line_edits(lines, cls.QUANTITY_FIELDS, cls.LEDGER_FIELD)
        if any(not isinstance(edit, LineCreate) for edit in edits):
            raise ValidationError("A new export cannot reference existing lines", "lines")
        edits = resolve_ingredients(edits)

        export = cls.model.objects.create(
            export_date=to_date(export_date, "export_date"),
            purpose=purpose or "",
            status=status,
            created_by_id=user_id,
            updated_by_id=user_id,
        )

        # Created as Completed: lines are deducted straight away, without an availability check
        cls._reconciler(export, user_id).apply(edits)

        logger.info(
            f"Stock export created: {export.id} ({status.label}) with {len(edits)} lines "
            f"by user {user_id}"
        )

        return success_response(
            {"stock_export": cls.serialize(cls.get_or_404(export.id))},
            "Stock export created"
        )

    # ==================== STATUS ====================

    @classmethod
    @transaction.atomic
    def set_status(cls, export_id: int, status: int, user_id: int = None) -> Dict[str, Any]:
        new_status = cls._parse_status(status)
        export = cls.get_for_update(export_id)
        old_status = Status(export.status)

        cls._transition(export, new_status)

        export.updated_by_id = user_id
        export.save(update_fields=["status", "updated_by", "updated_at"])

        logger.info(
            f"Stock export status updated: {export.id} "
            f"{old_status.label} -> {new_status.label} by user {user_id}"
        )

        return success_response(
            {"stock_export": cls.serialize(export)},
            "Stock export status updated"
        )

    # ==================== UPDATE ====================

    @classmethod
    @transaction.atomic
    def update(cls,
               export_id: int,
               user_id: int = None,
               lines: List[Dict] = None,
               **kwargs) -> Dict[str, Any]:
        export = cls.get_for_update(export_id)
        old_status = Status(export.status)

        edits = None
        if lines is not None:
            edits = resolve_ingredients(
                parse_line_edits(lines, cls.QUANTITY_FIELDS, cls.LEDGER_FIELD)
            )

        update_fields = ["updated_at", "updated_by"]

        if "export_date" in kwargs:
            export.export_date = to_date(kwargs["export_date"], "export_date")
            update_fields.append("export_date")

        if "purpose" in kwargs:
            export.purpose = kwargs["purpose"] or ""
            update_fields.append("purpose")

        new_status = old_status
        if kwargs.get("status") is not None:
            new_status = cls._parse_status(kwargs["status"])
            update_fields.append("status")

        completing = new_status == Status.COMPLETED and old_status != Status.COMPLETED

        # Completing: edit the lines first, then check and deduct the final line set
        if completing and edits is not None:
            cls._reconciler(export, user_id).apply(edits)

        cls._transition(export, new_status)

        export.updated_by_id = user_id
        export.save(update_fields=update_fields)

        # Otherwise line edits follow the resulting status
        if not completing and edits is not None:
            cls._reconciler(export, user_id).apply(edits)

        logger.info(
            f"Stock export updated: {export.id} "
            f"({old_status.label} -> {Status(export.status).label}, "
            f"{len(edits) if edits is not None else 0} line edits) by user {user_id}"
        )

        return success_response(
            {"stock_export": cls.serialize(cls.get_or_404(export.id))},
            "Stock export updated"
        )

    # ==================== DELETE ====================

    @classmethod
    @transaction.atomic
    def delete(cls, export_id: int, user_id: int = None) -> Dict[str, Any]:
        export = cls.get_for_update(export_id)

        if export.is_completed:
            for detail in export.details.all():
                LedgerService.increment(detail.ingredient_id, detail.quantity)

        export.delete()

        logger.info(f"Stock export deleted: {export_id} by user {user_id}")

        return success_response({"id": export_id}, "Stock export deleted")
