"""
Tests for line edit parsing and the LineReconciler.
"""
from datetime import date
from decimal import Decimal

import pytest

from stock.models import StockImport, StockImportDetail
from stock.services import (
    LineCreate, LineUpdate, LineDelete, LineReconciler,
    parse_line_edits, resolve_ingredients, ValidationError, NotFoundError,
)


# =============================================================================
# Parsing
# =============================================================================


class TestParseLineEdits:

    def test_tags_each_line(self):
        edits = parse_line_edits(
            [
                {"id": 4, "delete": True},
                {"id": 5, "quantity": "2.5"},
                {"ingredient_id": 9, "quantity": 3},
            ],
            quantity_fields=("quantity",),
            quantity_field="quantity",
        )

        assert edits == [
            LineDelete(4),
            LineUpdate(5, {"quantity": Decimal("2.5")}),
            LineCreate({"ingredient_id": 9, "quantity": Decimal("3")}),
        ]

    def test_none_means_no_edits(self):
        assert parse_line_edits(None, ("quantity",), "quantity") == []

    def test_delete_without_id(self):
        with pytest.raises(ValidationError):
            parse_line_edits([{"delete": True}], ("quantity",), "quantity")

    def test_new_line_needs_ingredient(self):
        with pytest.raises(ValidationError) as exc:
            parse_line_edits([{"quantity": 1}], ("quantity",), "quantity")

        assert exc.value.field == "ingredient_id"

    def test_non_numeric_quantity(self):
        with pytest.raises(ValidationError) as exc:
            parse_line_edits([{"ingredient_id": 1, "quantity": "lots"}], ("quantity",), "quantity")

        assert exc.value.field == "quantity"

    def test_quantities_rounded_to_two_places(self):
        edits = parse_line_edits(
            [{"ingredient_id": 1, "quantity": "2.555"}, {"ingredient_id": 2, "quantity": "0.004"}],
            ("quantity",),
            "quantity",
        )

        assert [edit.values["quantity"] for edit in edits] == [Decimal("2.56"), Decimal("0.00")]

    def test_line_must_be_object(self):
        with pytest.raises(ValidationError):
            parse_line_edits(["flour"], ("quantity",), "quantity")


@pytest.mark.django_db
class TestResolveIngredients:

    def test_known_ingredients_pass_through(self, flour):
        edits = [LineCreate({"ingredient_id": flour.id, "quantity": Decimal("1")}), LineDelete(3)]

        assert resolve_ingredients(edits) == edits

    def test_unknown_ingredient_is_rejected(self, flour):
        with pytest.raises(ValidationError) as exc:
            resolve_ingredients([LineUpdate(1, {"ingredient_id": 777})])

        assert exc.value.details["missing"] == [777]


# =============================================================================
# Reconciler
# =============================================================================


@pytest.mark.django_db
class TestLineReconciler:

    @pytest.fixture
    def document(self):
        return StockImport.objects.create(import_date=date(2025, 1, 1))

    def _reconciler(self, document, sign=1, affects_stock=True):
        return LineReconciler(
            document=document,
            detail_model=StockImportDetail,
            parent_field="stock_import",
            quantity_field="received_quantity",
            sign=sign,
            affects_stock=affects_stock,
        )

    def test_create_posts_signed_quantity(self, document, flour, stock_of):
        self._reconciler(document, sign=-1).apply(
            [LineCreate({"ingredient_id": flour.id, "received_quantity": Decimal("4")})]
        )

        assert stock_of(flour) == Decimal("-4")

    def test_update_undoes_old_then_posts_new(self, document, flour, sugar, stock_of):
        reconciler = self._reconciler(document)
        reconciler.apply([LineCreate({"ingredient_id": flour.id, "received_quantity": Decimal("10")})])
        line = StockImportDetail.objects.get()

        reconciler.apply([LineUpdate(line.id, {"ingredient_id": sugar.id, "received_quantity": Decimal("7")})])

        assert stock_of(flour) == Decimal("0")
        assert stock_of(sugar) == Decimal("7")

    def test_stock_untouched_when_not_affecting(self, document, flour, stock_of):
        self._reconciler(document, affects_stock=False).apply(
            [LineCreate({"ingredient_id": flour.id, "received_quantity": Decimal("4")})]
        )

        assert stock_of(flour) == Decimal("0")
        assert StockImportDetail.objects.count() == 1

    def test_unknown_line(self, document):
        with pytest.raises(NotFoundError):
            self._reconciler(document).apply([LineDelete(404)])

    def test_rejects_unknown_edit_type(self, document):
        with pytest.raises(TypeError):
            self._reconciler(document).apply([{"id": 1}])
