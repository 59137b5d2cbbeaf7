"""
Tests for StockExportService and its status state machine.
"""
from decimal import Decimal

import pytest

from stock.models import StockExport
from stock.services import (
    StockExportService, InsufficientStockError, ValidationError, NotFoundError
)

pytestmark = pytest.mark.django_db

DRAFT = StockExport.Status.DRAFT
APPROVED = StockExport.Status.APPROVED
COMPLETED = StockExport.Status.COMPLETED


def _create(today, lines, status=DRAFT, purpose="Kitchen"):
    return StockExportService.create(
        export_date=today, purpose=purpose, status=status, lines=lines
    )["stock_export"]


# =============================================================================
# Create / Delete
# =============================================================================


class TestCreateExport:

    def test_draft_export_does_not_touch_stock(self, make_ingredient, stock_of, today):
        butter = make_ingredient(name="Butter", stock="40")

        export = _create(today, [{"ingredient_id": butter.id, "quantity": "10"}])

        assert export["status"] == DRAFT
        assert export["status_label"] == "Draft"
        assert stock_of(butter) == Decimal("40")

    def test_completed_export_deducts_immediately(self, make_ingredient, stock_of, today):
        butter = make_ingredient(name="Butter", stock="40")

        export = _create(today, [{"ingredient_id": butter.id, "quantity": "10"}], status=COMPLETED)

        assert export["status_label"] == "Completed"
        assert stock_of(butter) == Decimal("30")

    def test_completed_create_skips_availability_check(self, make_ingredient, stock_of, today):
        butter = make_ingredient(name="Butter", stock="5")

        _create(today, [{"ingredient_id": butter.id, "quantity": "10"}], status=COMPLETED)

        assert stock_of(butter) == Decimal("-5")

    def test_invalid_status(self, today):
        with pytest.raises(ValidationError):
            _create(today, [], status=7)

    def test_line_without_quantity(self, flour, today):
        with pytest.raises(ValidationError) as exc:
            _create(today, [{"ingredient_id": flour.id}])

        assert exc.value.field == "quantity"


class TestDeleteExport:

    def test_delete_completed_export_restores_stock(self, make_ingredient, stock_of, today):
        butter = make_ingredient(name="Butter", stock="40")
        export = _create(today, [{"ingredient_id": butter.id, "quantity": "10"}], status=COMPLETED)

        StockExportService.delete(export["id"])

        assert stock_of(butter) == Decimal("40")
        assert not StockExport.objects.filter(id=export["id"]).exists()

    def test_delete_draft_export_has_no_stock_effect(self, make_ingredient, stock_of, today):
        butter = make_ingredient(name="Butter", stock="40")
        export = _create(today, [{"ingredient_id": butter.id, "quantity": "10"}])

        StockExportService.delete(export["id"])

        assert stock_of(butter) == Decimal("40")


# =============================================================================
# Status transitions
# =============================================================================


class TestSetStatus:

    def test_draft_to_completed_and_back(self, make_ingredient, stock_of, today):
        butter = make_ingredient(name="Butter", stock="40")
        export = _create(today, [{"ingredient_id": butter.id, "quantity": "15"}])

        StockExportService.set_status(export["id"], COMPLETED)
        assert stock_of(butter) == Decimal("25")

        result = StockExportService.set_status(export["id"], DRAFT)
        assert result["stock_export"]["status_label"] == "Draft"
        assert stock_of(butter) == Decimal("40")

    def test_between_non_completed_statuses(self, make_ingredient, stock_of, today):
        butter = make_ingredient(name="Butter", stock="40")
        export = _create(today, [{"ingredient_id": butter.id, "quantity": "15"}])

        result = StockExportService.set_status(export["id"], APPROVED)

        assert result["stock_export"]["status"] == APPROVED
        assert stock_of(butter) == Decimal("40")

    def test_same_status_is_a_no_op(self, make_ingredient, stock_of, today):
        butter = make_ingredient(name="Butter", stock="40")
        export = _create(today, [{"ingredient_id": butter.id, "quantity": "15"}], status=COMPLETED)

        StockExportService.set_status(export["id"], COMPLETED)

        assert stock_of(butter) == Decimal("25")

    def test_insufficient_stock_aborts_whole_transition(self, make_ingredient, stock_of, today):
        butter = make_ingredient(name="Butter", stock="50")
        cream = make_ingredient(name="Cream", unit="l", stock="5")
        export = _create(today, [
            {"ingredient_id": butter.id, "quantity": "10"},
            {"ingredient_id": cream.id, "quantity": "10"},
        ])

        with pytest.raises(InsufficientStockError) as exc:
            StockExportService.set_status(export["id"], COMPLETED)

        assert exc.value.details["item"] == "Cream"
        assert Decimal(exc.value.details["available"]) == Decimal("5")
        assert Decimal(exc.value.details["required"]) == Decimal("10")
        assert exc.value.details["unit"] == "l"
        assert stock_of(butter) == Decimal("50")
        assert stock_of(cream) == Decimal("5")
        assert StockExport.objects.get(id=export["id"]).status == DRAFT

    def test_lines_for_same_ingredient_are_checked_together(self, make_ingredient, stock_of, today):
        butter = make_ingredient(name="Butter", stock="15")
        export = _create(today, [
            {"ingredient_id": butter.id, "quantity": "10"},
            {"ingredient_id": butter.id, "quantity": "10"},
        ])

        with pytest.raises(InsufficientStockError):
            StockExportService.set_status(export["id"], COMPLETED)

        assert stock_of(butter) == Decimal("15")

    def test_missing_export(self):
        with pytest.raises(NotFoundError):
            StockExportService.set_status(999, COMPLETED)


# =============================================================================
# Update
# =============================================================================


class TestUpdateExport:

    @pytest.fixture
    def butter(self, make_ingredient):
        return make_ingredient(name="Butter", stock="100")

    @pytest.fixture
    def completed_export(self, butter, today):
        return _create(today, [{"ingredient_id": butter.id, "quantity": "10"}], status=COMPLETED)

    def test_quantity_change_on_completed_export_applies_difference(
            self, completed_export, butter, stock_of):
        line_id = completed_export["details"][0]["id"]

        StockExportService.update(completed_export["id"], lines=[{"id": line_id, "quantity": "15"}])

        assert stock_of(butter) == Decimal("85")

    def test_ingredient_change_on_completed_export(self, completed_export, butter, make_ingredient, stock_of):
        cream = make_ingredient(name="Cream", stock="100")
        line_id = completed_export["details"][0]["id"]

        StockExportService.update(
            completed_export["id"],
            lines=[{"id": line_id, "ingredient_id": cream.id, "quantity": "15"}],
        )

        assert stock_of(butter) == Decimal("100")
        assert stock_of(cream) == Decimal("85")

    def test_add_and_delete_lines_on_completed_export(self, completed_export, butter, make_ingredient, stock_of):
        cream = make_ingredient(name="Cream", stock="20")
        line_id = completed_export["details"][0]["id"]

        result = StockExportService.update(
            completed_export["id"],
            lines=[{"id": line_id, "delete": True}, {"ingredient_id": cream.id, "quantity": "4"}],
        )

        assert stock_of(butter) == Decimal("100")
        assert stock_of(cream) == Decimal("16")
        assert len(result["stock_export"]["details"]) == 1

    def test_line_edits_on_draft_do_not_touch_stock(self, butter, stock_of, today):
        export = _create(today, [{"ingredient_id": butter.id, "quantity": "10"}])
        line_id = export["details"][0]["id"]

        StockExportService.update(export["id"], lines=[{"id": line_id, "quantity": "30"}])

        assert stock_of(butter) == Decimal("100")

    def test_status_and_lines_in_one_call(self, butter, make_ingredient, stock_of, today):
        cream = make_ingredient(name="Cream", stock="50")
        export = _create(today, [{"ingredient_id": butter.id, "quantity": "10"}])

        StockExportService.update(
            export["id"],
            status=COMPLETED,
            purpose="Banquet",
            lines=[{"ingredient_id": cream.id, "quantity": "5"}],
        )

        # Existing line deducted by the transition, the new line by the reconciliation
        assert stock_of(butter) == Decimal("90")
        assert stock_of(cream) == Decimal("45")
        assert StockExport.objects.get(id=export["id"]).purpose == "Banquet"

    def test_leaving_completed_with_line_edits(self, completed_export, butter, stock_of):
        line_id = completed_export["details"][0]["id"]

        StockExportService.update(
            completed_export["id"],
            status=APPROVED,
            lines=[{"id": line_id, "quantity": "50"}],
        )

        assert stock_of(butter) == Decimal("100")

    def test_update_into_completed_checks_availability(self, make_ingredient, stock_of, today):
        cream = make_ingredient(name="Cream", stock="3")
        export = _create(today, [{"ingredient_id": cream.id, "quantity": "5"}])

        with pytest.raises(InsufficientStockError):
            StockExportService.update(export["id"], status=COMPLETED, purpose="Changed")

        assert stock_of(cream) == Decimal("3")
        assert StockExport.objects.get(id=export["id"]).purpose == "Kitchen"

    def test_completing_checks_lines_left_after_edits(self, make_ingredient, stock_of, today):
        cream = make_ingredient(name="Cream", stock="5")
        milk = make_ingredient(name="Milk", stock="20")
        export = _create(today, [
            {"ingredient_id": cream.id, "quantity": "10"},
            {"ingredient_id": milk.id, "quantity": "4"},
        ])
        cream_line = next(d for d in export["details"] if d["ingredient_id"] == cream.id)

        StockExportService.update(
            export["id"], status=COMPLETED, lines=[{"id": cream_line["id"], "delete": True}]
        )

        assert stock_of(cream) == Decimal("5")
        assert stock_of(milk) == Decimal("16")

    def test_completing_checks_lines_added_in_same_call(self, butter, make_ingredient, stock_of, today):
        cream = make_ingredient(name="Cream", stock="2")
        export = _create(today, [{"ingredient_id": butter.id, "quantity": "10"}])

        with pytest.raises(InsufficientStockError):
            StockExportService.update(
                export["id"], status=COMPLETED, lines=[{"ingredient_id": cream.id, "quantity": "3"}]
            )

        assert stock_of(butter) == Decimal("100")
        assert stock_of(cream) == Decimal("2")
        assert len(StockExportService.get(export["id"])["stock_export"]["details"]) == 1
