"""
Line reconciliation for multi-line stock documents.

A document update arrives as a list of line edits. Each edit is parsed into
one of LineCreate / LineUpdate / LineDelete and then applied by a
LineReconciler, which undoes the stock effect of the old line state and
posts the effect of the new one through LedgerService.

The only difference between imports and exports is the sign of a line's
effect: +1 for imports (a line adds stock), -1 for completed exports.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from django.db import models

from stock.models import Ingredient
from stock.services.base_service import NotFoundError, ValidationError, to_quantity
from stock.services.ledger_service import LedgerService, ledger_setting

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LineCreate:
    values: Dict[str, Any]


@dataclass(frozen=True)
class LineUpdate:
    line_id: int
    values: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class LineDelete:
    line_id: int


LineEdit = Union[LineCreate, LineUpdate, LineDelete]


def _to_id(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer", name)


def parse_line_edits(lines: Optional[Iterable[Dict]],
                     quantity_fields: Sequence[str],
                     quantity_field: str) -> List[LineEdit]:
    """
    Turn raw line dicts into tagged edits.

    {"id": 3, "delete": true}           -> LineDelete(3)
    {"id": 3, "quantity": 5, ...}       -> LineUpdate(3, {...})
    {"ingredient_id": 1, "quantity": 5} -> LineCreate({...})
    """
    edits: List[LineEdit] = []

    for index, line in enumerate(lines or []):
        if not isinstance(line, dict):
            raise ValidationError(f"Line {index + 1} must be an object", "lines")

        line_id = line.get("id")
        if line.get("delete"):
            if not line_id:
                raise ValidationError(f"Line {index + 1} is marked for deletion but has no id", "lines")
            edits.append(LineDelete(_to_id(line_id, "id")))
            continue

        values: Dict[str, Any] = {}
        if line.get("ingredient_id") is not None:
            values["ingredient_id"] = _to_id(line["ingredient_id"], "ingredient_id")
        for name in quantity_fields:
            if line.get(name) is not None:
                values[name] = to_quantity(line[name], name)

        if line_id:
            edits.append(LineUpdate(_to_id(line_id, "id"), values))
            continue

        if "ingredient_id" not in values:
            raise ValidationError(f"Line {index + 1}: ingredient_id is required", "ingredient_id")
        if quantity_field not in values:
            raise ValidationError(f"Line {index + 1}: {quantity_field} is required", quantity_field)
        edits.append(LineCreate(values))

    return edits


def resolve_ingredients(edits: List[LineEdit]) -> List[LineEdit]:
    """
    Check that every ingredient referenced by the edits exists.

    With STOCK_LEDGER["STRICT_IMPORT_LINES"] (the default) an unknown ingredient
    rejects the whole request; otherwise the offending edits are dropped.
    """
    referenced = {
        edit.values["ingredient_id"]
        for edit in edits
        if isinstance(edit, (LineCreate, LineUpdate)) and "ingredient_id" in edit.values
    }
    if not referenced:
        return edits

    known = set(Ingredient.objects.filter(pk__in=referenced).values_list("pk", flat=True))
    missing = referenced - known
    if not missing:
        return edits

    if ledger_setting("STRICT_IMPORT_LINES", True):
        first = sorted(missing)[0]
        raise ValidationError(f"Ingredient not found: {first}", "ingredient_id", {"missing": sorted(missing)})

    logger.warning(f"Skipping lines for unknown ingredients: {sorted(missing)}")
    return [
        edit for edit in edits
        if isinstance(edit, LineDelete) or edit.values.get("ingredient_id") not in missing
    ]


class LineReconciler:
    """Apply line edits to one document, keeping ingredient stock in step."""

    def __init__(self,
                 document: models.Model,
                 detail_model,
                 parent_field: str,
                 quantity_field: str,
                 sign: int,
                 affects_stock: bool = True,
                 user_id: int = None):
        self.document = document
        self.detail_model = detail_model
        self.parent_field = parent_field
        self.quantity_field = quantity_field
        self.sign = sign
        self.affects_stock = affects_stock
        self.user_id = user_id

    def apply(self, edits: Iterable[LineEdit]) -> None:
        for edit in edits:
            if isinstance(edit, LineDelete):
                self._delete(edit)
            elif isinstance(edit, LineUpdate):
                self._update(edit)
            elif isinstance(edit, LineCreate):
                self._create(edit)
            else:
                raise TypeError(f"Unknown line edit: {edit!r}")

    def _get_line(self, line_id: int):
        line = self.detail_model.objects.filter(
            pk=line_id, **{self.parent_field: self.document}
        ).first()
        if not line:
            raise NotFoundError(self.detail_model.__name__, line_id)
        return line

    def _post(self, ingredient_id: int, quantity: Decimal) -> None:
        if self.affects_stock:
            LedgerService.adjust(ingredient_id, self.sign * quantity)

    def _unpost(self, ingredient_id: int, quantity: Decimal) -> None:
        if self.affects_stock:
            LedgerService.adjust(ingredient_id, -self.sign * quantity)

    def _delete(self, edit: LineDelete) -> None:
        line = self._get_line(edit.line_id)
        self._unpost(line.ingredient_id, getattr(line, self.quantity_field))
        line.delete()

    def _update(self, edit: LineUpdate) -> None:
        line = self._get_line(edit.line_id)
        self._unpost(line.ingredient_id, getattr(line, self.quantity_field))

        for name, value in edit.values.items():
            setattr(line, name, value)
        line.updated_by_id = self.user_id
        line.save()

        self._post(line.ingredient_id, getattr(line, self.quantity_field))

    def _create(self, edit: LineCreate) -> None:
        line = self.detail_model.objects.create(
            **{self.parent_field: self.document},
            created_by_id=self.user_id,
            updated_by_id=self.user_id,
            **edit.values,
        )
        self._post(line.ingredient_id, getattr(line, self.quantity_field))
