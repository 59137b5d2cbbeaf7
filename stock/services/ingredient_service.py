import logging
from decimal import Decimal
from typing import Dict, Any, List

from django.core.cache import cache
from django.db import transaction
from django.db.models import F

from stock.models import Ingredient, IngredientCategory
from stock.services.base_service import (
    BaseService, success_response, paginate_queryset,
    ValidationError, NotFoundError, BusinessRuleError, to_quantity
)
from stock.services.ledger_service import LedgerService, LOW_STOCK_CACHE_KEY, ledger_setting

logger = logging.getLogger(__name__)


class IngredientService(BaseService):
    model = Ingredient

    DIRECT_FIELDS = ["name", "unit", "is_active"]
    THRESHOLD_FIELDS = ["min_stock", "max_stock"]

    @classmethod
    def serialize(cls, ingredient: Ingredient) -> Dict[str, Any]:
        return {
            "id": ingredient.id,
            "name": ingredient.name,
            "unit": ingredient.unit,
            "category_id": ingredient.category_id,
            "category": {
                "id": ingredient.category.id,
                "name": ingredient.category.name,
            } if ingredient.category else None,
            "current_stock": str(ingredient.current_stock),
            "min_stock": str(ingredient.min_stock),
            "max_stock": str(ingredient.max_stock) if ingredient.max_stock is not None else None,
            "is_below_min_stock": ingredient.is_below_min_stock,
            "is_above_max_stock": ingredient.is_above_max_stock,
            "is_active": ingredient.is_active,
            "created_at": ingredient.created_at.isoformat(),
            "updated_at": ingredient.updated_at.isoformat(),
        }

    @classmethod
    def serialize_brief(cls, ingredient: Ingredient) -> Dict[str, Any]:
        return {
            "id": ingredient.id,
            "name": ingredient.name,
            "unit": ingredient.unit,
            "current_stock": str(ingredient.current_stock),
        }

    # ==================== LIST & GET ====================

    @classmethod
    def list(cls,
             page: int = 1,
             per_page: int = 20,
             name: str = None,
             unit: str = None,
             is_active: bool = None,
             low_stock: bool = False,
             category_id: int = None) -> Dict[str, Any]:
        queryset = cls.model.objects.select_related("category")

        if name:
            queryset = queryset.filter(name__icontains=name)

        if unit:
            queryset = queryset.filter(unit=unit)

        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)

        if low_stock:
            queryset = queryset.filter(current_stock__lt=F("min_stock"))

        if category_id:
            queryset = queryset.filter(category_id=category_id)

        ingredients, pagination = paginate_queryset(queryset.order_by("name"), page, per_page)

        return success_response({
            "ingredients": [cls.serialize(i) for i in ingredients],
            "pagination": pagination,
        })

    @classmethod
    def get(cls, ingredient_id: int) -> Dict[str, Any]:
        ingredient = cls.model.objects.select_related("category").filter(id=ingredient_id).first()
        if not ingredient:
            raise NotFoundError("Ingredient", ingredient_id)

        return success_response({"ingredient": cls.serialize(ingredient)})

    # ==================== CREATE & UPDATE ====================

    @classmethod
    def _resolve_category(cls, category_id):
        if not category_id:
            return None
        category = IngredientCategory.objects.filter(id=category_id).first()
        if not category:
            raise NotFoundError("Ingredient category", category_id)
        return category

    @classmethod
    def _validate_thresholds(cls, min_stock: Decimal, max_stock: Decimal) -> None:
        if max_stock is not None and max_stock <= min_stock:
            raise ValidationError("max_stock must be greater than min_stock", "max_stock")

    @classmethod
    @transaction.atomic
    def create(cls,
               name: str,
               unit: str,
               min_stock: Decimal = Decimal("0"),
               max_stock: Decimal = None,
               category_id: int = None,
               is_active: bool = True,
               user_id: int = None) -> Dict[str, Any]:
        if not name or not name.strip():
            raise ValidationError("Name is required", "name")
        if not unit or not unit.strip():
            raise ValidationError("Unit is required", "unit")

        if cls.model.objects.filter(name__iexact=name.strip()).exists():
            raise ValidationError(f"Ingredient '{name.strip()}' already exists", "name")

        min_stock = to_quantity(min_stock, "min_stock")
        max_stock = to_quantity(max_stock, "max_stock") if max_stock is not None else None
        cls._validate_thresholds(min_stock, max_stock)

        ingredient = cls.model.objects.create(
            name=name.strip(),
            unit=unit.strip(),
            category=cls._resolve_category(category_id),
            min_stock=min_stock,
            max_stock=max_stock,
            is_active=is_active,
            created_by_id=user_id,
            updated_by_id=user_id,
        )
        LedgerService.invalidate_alerts()

        logger.info(f"Ingredient created: {ingredient.id} ({ingredient.name}) by user {user_id}")

        return success_response({"ingredient": cls.serialize(ingredient)}, "Ingredient created")

    @classmethod
    @transaction.atomic
    def update(cls, ingredient_id: int, user_id: int = None, **kwargs) -> Dict[str, Any]:
        if "current_stock" in kwargs:
            raise ValidationError(
                "current_stock can only change through imports, exports and losses",
                "current_stock"
            )

        ingredient = cls.get_or_404(ingredient_id)
        update_fields = ["updated_at", "updated_by"]

        if "category_id" in kwargs:
            ingredient.category = cls._resolve_category(kwargs["category_id"])
            update_fields.append("category")

        for field in cls.DIRECT_FIELDS:
            if field in kwargs:
                value = kwargs[field]
                if field in ("name", "unit"):
                    if not value or not str(value).strip():
                        raise ValidationError(f"{field} must not be empty", field)
                    value = str(value).strip()
                if field == "name" and cls.model.objects.filter(name__iexact=value).exclude(id=ingredient.id).exists():
                    raise ValidationError(f"Ingredient '{value}' already exists", "name")
                setattr(ingredient, field, value)
                update_fields.append(field)

        for field in cls.THRESHOLD_FIELDS:
            if field in kwargs:
                value = kwargs[field]
                if value is None and field == "max_stock":
                    ingredient.max_stock = None
                else:
                    setattr(ingredient, field, to_quantity(value, field))
                update_fields.append(field)

        cls._validate_thresholds(ingredient.min_stock, ingredient.max_stock)

        ingredient.updated_by_id = user_id
        ingredient.save(update_fields=update_fields)
        LedgerService.invalidate_alerts()

        logger.info(f"Ingredient updated: {ingredient.id} by user {user_id}")

        ingredient.refresh_from_db()
        return success_response({"ingredient": cls.serialize(ingredient)}, "Ingredient updated")

    @classmethod
    @transaction.atomic
    def set_active(cls, ingredient_id: int, is_active: bool, user_id: int = None) -> Dict[str, Any]:
        ingredient = cls.get_or_404(ingredient_id)

        ingredient.is_active = bool(is_active)
        ingredient.updated_by_id = user_id
        ingredient.save(update_fields=["is_active", "updated_by", "updated_at"])
        LedgerService.invalidate_alerts()

        state = "activated" if ingredient.is_active else "deactivated"
        logger.info(f"Ingredient {state}: {ingredient.id} by user {user_id}")

        return success_response({"ingredient": cls.serialize(ingredient)}, f"Ingredient {state}")

    @classmethod
    @transaction.atomic
    def delete(cls, ingredient_id: int, user_id: int = None) -> Dict[str, Any]:
        """Remove an ingredient that no import, export or loss has touched."""
        ingredient = cls.get_for_update(ingredient_id)

        if (ingredient.import_details.exists()
                or ingredient.export_details.exists()
                or ingredient.losses.exists()):
            raise BusinessRuleError(
                f"Ingredient {ingredient.name} has stock movements and cannot be deleted. Deactivate it instead.",
                "ingredient_has_movements"
            )

        ingredient.delete()
        LedgerService.invalidate_alerts()

        logger.info(f"Ingredient deleted: {ingredient_id} by user {user_id}")

        return success_response({"id": ingredient_id}, "Ingredient deleted")

    # ==================== ALERTS & AUDIT ====================

    @classmethod
    def low_stock_alerts(cls) -> Dict[str, Any]:
        alerts = cache.get(LOW_STOCK_CACHE_KEY)

        if alerts is None:
            queryset = cls.model.objects.filter(
                is_active=True, current_stock__lt=F("min_stock")
            ).order_by("name")

            alerts = [
                {
                    **cls.serialize_brief(ingredient),
                    "min_stock": str(ingredient.min_stock),
                    "shortage": str(ingredient.min_stock - ingredient.current_stock),
                }
                for ingredient in queryset
            ]
            cache.set(LOW_STOCK_CACHE_KEY, alerts, ledger_setting("LOW_STOCK_CACHE_SECONDS", 60))

        return success_response({"alerts": alerts, "count": len(alerts)})

    @classmethod
    def verify_ledger(cls, ingredient_id: int = None) -> List[Dict[str, Any]]:
        """
        Compare every ingredient's current_stock with the stock implied by its
        imports, completed exports and losses. Returns one entry per mismatch.
        """
        if ingredient_id and not cls.exists(ingredient_id):
            raise NotFoundError("Ingredient", ingredient_id)

        drift = LedgerService.find_drift(ingredient_id)
        for entry in drift:
            logger.error(
                f"Stock drift on ingredient {entry['ingredient_id']}: "
                f"current {entry['current_stock']}, expected {entry['expected_stock']}"
            )
        return drift
