"""
Ledger Service - the only writer of Ingredient.current_stock

Every stock movement goes through adjust(), which issues a single
UPDATE ... SET current_stock = current_stock + delta so concurrent
documents touching the same ingredient never lose an update.
"""
import logging
from collections import OrderedDict
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from django.conf import settings
from django.core.cache import cache
from django.db.models import F, Sum

from stock.models import (
    Ingredient, StockImportDetail, StockExportDetail, StockExport, StockLoss
)
from stock.services.base_service import (
    NotFoundError, InsufficientStockError, to_decimal, round_decimal
)

logger = logging.getLogger(__name__)

LOW_STOCK_CACHE_KEY = "stock:low_stock_alerts"


def ledger_setting(name: str, default=None):
    return getattr(settings, "STOCK_LEDGER", {}).get(name, default)


class LedgerService:

    @classmethod
    def adjust(cls, ingredient_id: int, delta: Decimal) -> None:
        delta = round_decimal(to_decimal(delta))
        if delta == 0:
            return

        updated = Ingredient.objects.filter(pk=ingredient_id).update(
            current_stock=F("current_stock") + delta
        )
        if not updated:
            raise NotFoundError("Ingredient", ingredient_id)

        logger.debug(f"Ingredient {ingredient_id} stock adjusted by {delta}")
        cls.invalidate_alerts()

    @classmethod
    def increment(cls, ingredient_id: int, quantity: Decimal) -> None:
        cls.adjust(ingredient_id, to_decimal(quantity))

    @classmethod
    def decrement(cls, ingredient_id: int, quantity: Decimal) -> None:
        cls.adjust(ingredient_id, -to_decimal(quantity))

    @classmethod
    def ensure_sufficient(cls, requirements: Iterable[Tuple[int, Decimal]]) -> None:
        """
        Raise InsufficientStockError unless every ingredient holds at least
        the quantity required of it. Quantities for the same ingredient are
        summed. Ingredient rows are locked until the surrounding transaction ends.
        """
        required: Dict[int, Decimal] = OrderedDict()
        for ingredient_id, quantity in requirements:
            required[ingredient_id] = required.get(ingredient_id, Decimal("0")) + round_decimal(to_decimal(quantity))

        if not required:
            return

        ingredients = Ingredient.objects.select_for_update().in_bulk(list(required))

        for ingredient_id, quantity in required.items():
            ingredient = ingredients.get(ingredient_id)
            if ingredient is None:
                raise NotFoundError("Ingredient", ingredient_id)
            if ingredient.current_stock < quantity:
                raise InsufficientStockError(
                    ingredient.name, quantity, ingredient.current_stock, ingredient.unit
                )

    @classmethod
    def invalidate_alerts(cls) -> None:
        cache.delete(LOW_STOCK_CACHE_KEY)

    # ==================== AUDIT ====================

    @classmethod
    def expected_stock(cls, ingredient_id: Optional[int] = None) -> Dict[int, Decimal]:
        """Stock each ingredient should hold according to the recorded documents."""
        imports = StockImportDetail.objects.all()
        exports = StockExportDetail.objects.filter(
            stock_export__status=StockExport.Status.COMPLETED
        )
        losses = StockLoss.objects.all()
        ingredients = Ingredient.objects.all()

        if ingredient_id:
            imports = imports.filter(ingredient_id=ingredient_id)
            exports = exports.filter(ingredient_id=ingredient_id)
            losses = losses.filter(ingredient_id=ingredient_id)
            ingredients = ingredients.filter(pk=ingredient_id)

        expected = {pk: Decimal("0") for pk in ingredients.values_list("pk", flat=True)}

        movements = [
            (imports.values("ingredient_id").annotate(total=Sum("received_quantity")), 1),
            (exports.values("ingredient_id").annotate(total=Sum("quantity")), -1),
            (losses.values("ingredient_id").annotate(total=Sum("quantity")), -1),
        ]
        for rows, sign in movements:
            for row in rows:
                expected[row["ingredient_id"]] = (
                    expected.get(row["ingredient_id"], Decimal("0")) + sign * round_decimal(to_decimal(row["total"]))
                )

        return expected

    @classmethod
    def find_drift(cls, ingredient_id: Optional[int] = None) -> List[Dict]:
        expected = cls.expected_stock(ingredient_id)
        ingredients = Ingredient.objects.filter(pk__in=list(expected)).order_by("pk")

        drift = []
        for ingredient in ingredients:
            should_be = expected[ingredient.pk]
            if ingredient.current_stock != should_be:
                drift.append({
                    "ingredient_id": ingredient.pk,
                    "name": ingredient.name,
                    "unit": ingredient.unit,
                    "current_stock": str(ingredient.current_stock),
                    "expected_stock": str(should_be),
                    "difference": str(ingredient.current_stock - should_be),
                })
        return drift
