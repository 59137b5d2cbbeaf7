"""
HTTP-level tests for the stock API: payload validation and error mapping.
"""
import json
from decimal import Decimal

import pytest
from django.urls import reverse

pytestmark = pytest.mark.django_db


def _send(client, method, url, payload):
    return getattr(client, method)(url, data=json.dumps(payload), content_type="application/json")


class TestIngredientViews:

    def test_create_and_show(self, client, category):
        response = _send(client, "post", reverse("stock:ingredient-list"), {
            "name": "Flour", "unit": "kg", "min_stock": "30", "max_stock": "100", "category_id": category.id,
        })

        assert response.status_code == 201
        ingredient_id = response.json()["ingredient"]["id"]

        response = client.get(reverse("stock:ingredient-detail", args=[ingredient_id]))
        assert response.status_code == 200
        assert Decimal(response.json()["ingredient"]["current_stock"]) == Decimal("0")

    def test_current_stock_cannot_be_set(self, client, flour):
        response = _send(client, "put", reverse("stock:ingredient-detail", args=[flour.id]), {
            "current_stock": "999",
        })

        body = response.json()
        assert response.status_code == 400
        assert body["success"] is False
        assert body["error"]["code"] == "validation_error"
        assert body["error"]["details"]["field"] == "current_stock"

    def test_missing_ingredient_is_404(self, client):
        response = client.get(reverse("stock:ingredient-detail", args=[404]))

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "not_found"

    def test_low_stock_endpoint(self, client, flour):
        response = client.get(reverse("stock:ingredient-low-stock"))

        assert response.status_code == 200
        assert response.json()["count"] == 1

    def test_activate_toggle(self, client, flour):
        url = reverse("stock:ingredient-activate", args=[flour.id])

        response = _send(client, "patch", url, {"is_active": False})

        assert response.status_code == 200
        assert response.json()["ingredient"]["is_active"] is False

        response = _send(client, "patch", url, {})
        assert response.status_code == 400

    def test_delete_unused_ingredient(self, client, flour):
        response = client.delete(reverse("stock:ingredient-detail", args=[flour.id]))

        assert response.status_code == 200
        assert client.get(reverse("stock:ingredient-detail", args=[flour.id])).status_code == 404

    def test_delete_ingredient_with_movements_is_conflict(self, client, flour):
        _send(client, "post", reverse("stock:import-list"), {
            "import_date": "2025-01-10",
            "lines": [{"ingredient_id": flour.id, "received_quantity": 1, "unit_price": 1}],
        })

        response = client.delete(reverse("stock:ingredient-detail", args=[flour.id]))

        body = response.json()
        assert response.status_code == 409
        assert body["error"]["code"] == "business_rule"
        assert body["error"]["details"]["rule"] == "ingredient_has_movements"


class TestImportViews:

    def test_create_accepts_legacy_details_key(self, client, flour, stock_of):
        response = _send(client, "post", reverse("stock:import-list"), {
            "import_date": "2025-01-10",
            "details": [{"ingredient_id": flour.id, "ordered_quantity": 50, "received_quantity": 50, "unit_price": 2}],
        })

        assert response.status_code == 201
        assert Decimal(response.json()["stock_import"]["total_amount"]) == Decimal("100")
        assert stock_of(flour) == Decimal("50")

    def test_serializer_errors_are_validation_errors(self, client, flour):
        response = _send(client, "post", reverse("stock:import-list"), {
            "import_date": "not-a-date",
            "lines": [{"ingredient_id": flour.id, "received_quantity": -5}],
        })

        body = response.json()
        assert response.status_code == 400
        assert body["error"]["code"] == "validation_error"
        assert "import_date" in body["error"]["details"]["errors"]

    def test_new_line_without_quantity(self, client, flour):
        response = _send(client, "post", reverse("stock:import-list"), {
            "import_date": "2025-01-10",
            "lines": [{"ingredient_id": flour.id}],
        })

        assert response.status_code == 400

    def test_invalid_json(self, client):
        response = client.post(reverse("stock:import-list"), data="{", content_type="application/json")

        assert response.status_code == 400

    def test_list_filters_by_date(self, client, flour):
        for day in ("2025-01-01", "2025-01-15"):
            _send(client, "post", reverse("stock:import-list"), {
                "import_date": day,
                "lines": [{"ingredient_id": flour.id, "received_quantity": 1, "unit_price": 1}],
            })

        response = client.get(reverse("stock:import-list"), {"date_from": "2025-01-10"})

        body = response.json()
        assert body["pagination"]["total_items"] == 1
        assert body["stock_imports"][0]["import_date"] == "2025-01-15"

    def test_delete(self, client, flour, stock_of):
        created = _send(client, "post", reverse("stock:import-list"), {
            "import_date": "2025-01-10",
            "lines": [{"ingredient_id": flour.id, "received_quantity": 8, "unit_price": 1}],
        }).json()

        response = client.delete(reverse("stock:import-detail", args=[created["stock_import"]["id"]]))

        assert response.status_code == 200
        assert stock_of(flour) == Decimal("0")


class TestExportViews:

    def test_status_endpoint_reports_insufficient_stock(self, client, make_ingredient, stock_of):
        butter = make_ingredient(name="Butter", unit="kg", stock="5")
        created = _send(client, "post", reverse("stock:export-list"), {
            "export_date": "2025-01-10",
            "purpose": "Pastry",
            "lines": [{"ingredient_id": butter.id, "quantity": 10}],
        }).json()

        response = _send(client, "patch", reverse("stock:export-status", args=[created["stock_export"]["id"]]), {
            "status": 2,
        })

        body = response.json()
        assert response.status_code == 400
        assert body["error"]["code"] == "insufficient_stock"
        assert body["error"]["details"]["item"] == "Butter"
        assert body["error"]["details"]["unit"] == "kg"
        assert stock_of(butter) == Decimal("5")

    def test_status_endpoint_completes_export(self, client, make_ingredient, stock_of):
        butter = make_ingredient(name="Butter", stock="50")
        created = _send(client, "post", reverse("stock:export-list"), {
            "export_date": "2025-01-10",
            "lines": [{"ingredient_id": butter.id, "quantity": 10}],
        }).json()

        response = _send(client, "patch", reverse("stock:export-status", args=[created["stock_export"]["id"]]), {
            "status": 2,
        })

        assert response.status_code == 200
        assert response.json()["stock_export"]["status_label"] == "Completed"
        assert stock_of(butter) == Decimal("40")

    def test_invalid_status_value(self, client, make_ingredient):
        butter = make_ingredient(name="Butter", stock="50")
        created = _send(client, "post", reverse("stock:export-list"), {
            "export_date": "2025-01-10",
            "lines": [{"ingredient_id": butter.id, "quantity": 10}],
        }).json()

        response = _send(client, "patch", reverse("stock:export-status", args=[created["stock_export"]["id"]]), {
            "status": 9,
        })

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "validation_error"

    def test_list_filters_by_status(self, client, make_ingredient):
        butter = make_ingredient(name="Butter", stock="50")
        for status in (0, 2):
            _send(client, "post", reverse("stock:export-list"), {
                "export_date": "2025-01-10",
                "status": status,
                "lines": [{"ingredient_id": butter.id, "quantity": 1}],
            })

        response = client.get(reverse("stock:export-list"), {"status": 2})

        body = response.json()
        assert body["pagination"]["total_items"] == 1
        assert body["stock_exports"][0]["status_label"] == "Completed"


class TestLossViews:

    def test_logged_in_user_is_recorded_as_employee(self, client, user, make_ingredient, stock_of):
        milk = make_ingredient(name="Milk", unit="l", stock="10")
        client.force_login(user)

        response = _send(client, "post", reverse("stock:loss-list"), {
            "ingredient_id": milk.id, "quantity": "2", "loss_date": "2025-01-10", "reason": "Expired",
        })

        body = response.json()
        assert response.status_code == 201
        assert body["stock_loss"]["employee_id"] == user.id
        assert body["stock_loss"]["created_by_id"] == user.id
        assert stock_of(milk) == Decimal("8")

    def test_partial_update(self, client, make_ingredient, stock_of):
        milk = make_ingredient(name="Milk", stock="10")
        created = _send(client, "post", reverse("stock:loss-list"), {
            "ingredient_id": milk.id, "quantity": "2", "loss_date": "2025-01-10",
        }).json()

        response = _send(client, "put", reverse("stock:loss-detail", args=[created["stock_loss"]["id"]]), {
            "quantity": "5",
        })

        assert response.status_code == 200
        assert stock_of(milk) == Decimal("5")
