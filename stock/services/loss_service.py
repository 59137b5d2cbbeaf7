import logging
from datetime import date
from decimal import Decimal
from typing import Dict, Any

from django.contrib.auth import get_user_model
from django.db import transaction

from stock.models import StockLoss, Ingredient
from stock.services.base_service import (
    BaseService, success_response, paginate_queryset,
    NotFoundError, ValidationError, to_quantity, to_date
)
from stock.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


class StockLossService(BaseService):
    """Shrinkage and waste. A loss deducts stock immediately, with no availability check."""

    model = StockLoss

    @classmethod
    def serialize(cls, loss: StockLoss) -> Dict[str, Any]:
        return {
            "id": loss.id,
            "ingredient_id": loss.ingredient_id,
            "ingredient": {
                "id": loss.ingredient.id,
                "name": loss.ingredient.name,
                "unit": loss.ingredient.unit,
            },
            "quantity": str(loss.quantity),
            "reason": loss.reason,
            "loss_date": loss.loss_date.isoformat(),
            "employee_id": loss.employee_id,
            "employee": {
                "id": loss.employee.id,
                "username": loss.employee.get_username(),
            } if loss.employee else None,
            "created_by_id": loss.created_by_id,
            "updated_by_id": loss.updated_by_id,
            "created_at": loss.created_at.isoformat(),
            "updated_at": loss.updated_at.isoformat(),
        }

    @classmethod
    def list(cls,
             page: int = 1,
             per_page: int = 20,
             date_from: date = None,
             date_to: date = None,
             ingredient_id: int = None) -> Dict[str, Any]:
        queryset = cls.model.objects.select_related("ingredient", "employee")

        if date_from:
            queryset = queryset.filter(loss_date__gte=date_from)

        if date_to:
            queryset = queryset.filter(loss_date__lte=date_to)

        if ingredient_id:
            queryset = queryset.filter(ingredient_id=ingredient_id)

        queryset = queryset.order_by("-loss_date", "-id")

        losses, pagination = paginate_queryset(queryset, page, per_page)

        return success_response({
            "stock_losses": [cls.serialize(loss) for loss in losses],
            "pagination": pagination,
        })

    @classmethod
    def get(cls, loss_id: int) -> Dict[str, Any]:
        loss = cls.model.objects.select_related("ingredient", "employee").filter(id=loss_id).first()
        if not loss:
            raise NotFoundError("Stock loss", loss_id)

        return success_response({"stock_loss": cls.serialize(loss)})

    @classmethod
    def _resolve_ingredient(cls, ingredient_id) -> Ingredient:
        if not ingredient_id:
            raise ValidationError("ingredient_id is required", "ingredient_id")
        ingredient = Ingredient.objects.filter(id=ingredient_id).first()
        if not ingredient:
            raise NotFoundError("Ingredient", ingredient_id)
        return ingredient

    @classmethod
    def _resolve_employee(cls, employee_id):
        if not employee_id:
            return None
        employee = get_user_model().objects.filter(pk=employee_id).first()
        if not employee:
            raise NotFoundError("Employee", employee_id)
        return employee

    @classmethod
    @transaction.atomic
    def create(cls,
               ingredient_id: int,
               quantity: Decimal,
               loss_date: date,
               reason: str = "",
               employee_id: int = None,
               user_id: int = None) -> Dict[str, Any]:
        ingredient = cls._resolve_ingredient(ingredient_id)
        quantity = to_quantity(quantity, "quantity")

        loss = cls.model.objects.create(
            ingredient=ingredient,
            quantity=quantity,
            reason=reason or "",
            loss_date=to_date(loss_date, "loss_date"),
            employee=cls._resolve_employee(employee_id or user_id),
            created_by_id=user_id,
            updated_by_id=user_id,
        )

        LedgerService.decrement(ingredient.id, quantity)

        logger.info(
            f"Stock loss recorded: {loss.id}, {quantity} {ingredient.unit} of "
            f"{ingredient.name} by user {user_id}"
        )

        return success_response({"stock_loss": cls.serialize(loss)}, "Stock loss recorded")

    @classmethod
    @transaction.atomic
    def update(cls, loss_id: int, user_id: int = None, **kwargs) -> Dict[str, Any]:
        loss = cls.get_for_update(loss_id)

        new_ingredient = loss.ingredient
        if "ingredient_id" in kwargs:
            new_ingredient = cls._resolve_ingredient(kwargs["ingredient_id"])

        new_quantity = loss.quantity
        if "quantity" in kwargs:
            new_quantity = to_quantity(kwargs["quantity"], "quantity")

        # Put the old quantity back on the old ingredient before applying the new values
        LedgerService.increment(loss.ingredient_id, loss.quantity)

        loss.ingredient = new_ingredient
        loss.quantity = new_quantity

        if "reason" in kwargs:
            loss.reason = kwargs["reason"] or ""

        if "loss_date" in kwargs:
            loss.loss_date = to_date(kwargs["loss_date"], "loss_date")

        if "employee_id" in kwargs:
            loss.employee = cls._resolve_employee(kwargs["employee_id"])

        loss.updated_by_id = user_id
        loss.save()

        LedgerService.decrement(loss.ingredient_id, loss.quantity)

        logger.info(f"Stock loss updated: {loss.id} by user {user_id}")

        return success_response({"stock_loss": cls.serialize(loss)}, "Stock loss updated")

    @classmethod
    @transaction.atomic
    def delete(cls, loss_id: int, user_id: int = None) -> Dict[str, Any]:
        loss = cls.get_for_update(loss_id)

        LedgerService.increment(loss.ingredient_id, loss.quantity)
        loss.delete()

        logger.info(f"Stock loss deleted: {loss_id} by user {user_id}")

        return success_response({"id": loss_id}, "Stock loss deleted")
