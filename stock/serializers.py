"""
Request payload validation for the stock API.

Serializers only check shape and basic ranges. Ledger rules (ingredient
existence, stock sufficiency) are enforced by the services.
"""
from rest_framework import serializers

from stock.models import StockExport
from stock.services.base_service import ValidationError

QUANTITY = dict(max_digits=18, decimal_places=2, min_value=0)


def validate_payload(serializer_class, data, partial: bool = False) -> dict:
    """Run a serializer and turn its errors into a service ValidationError."""
    serializer = serializer_class(data=data, partial=partial)
    if not serializer.is_valid():
        errors = serializer.errors
        field = next(iter(errors), None)
        message = "Invalid request data"
        if field is not None:
            first = errors[field]
            if isinstance(first, list) and first and isinstance(first[0], str):
                message = f"{field}: {first[0]}"
        raise ValidationError(message, field, {"errors": errors})
    return dict(serializer.validated_data)


class LineSerializer(serializers.Serializer):
    id = serializers.IntegerField(required=False, min_value=1)
    delete = serializers.BooleanField(required=False, default=False)
    ingredient_id = serializers.IntegerField(required=False, min_value=1)

    quantity_field = None

    def validate(self, attrs):
        if attrs.get("delete"):
            if not attrs.get("id"):
                raise serializers.ValidationError("A line marked for deletion needs an id")
            return attrs

        if not attrs.get("id"):
            missing = [
                name for name in ("ingredient_id", self.quantity_field)
                if attrs.get(name) is None
            ]
            if missing:
                raise serializers.ValidationError(
                    {name: "This field is required for a new line." for name in missing}
                )
        return attrs


class ImportLineSerializer(LineSerializer):
    ordered_quantity = serializers.DecimalField(required=False, **QUANTITY)
    received_quantity = serializers.DecimalField(required=False, **QUANTITY)
    unit_price = serializers.DecimalField(required=False, **QUANTITY)

    quantity_field = "received_quantity"


class ExportLineSerializer(LineSerializer):
    quantity = serializers.DecimalField(required=False, **QUANTITY)

    quantity_field = "quantity"


# ==================== INGREDIENTS ====================

class IngredientSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    unit = serializers.CharField(max_length=20)
    category_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    min_stock = serializers.DecimalField(**QUANTITY)
    max_stock = serializers.DecimalField(required=False, allow_null=True, **QUANTITY)
    is_active = serializers.BooleanField(required=False)


class IngredientStatusSerializer(serializers.Serializer):
    is_active = serializers.BooleanField()


# ==================== IMPORTS ====================

class StockImportSerializer(serializers.Serializer):
    import_date = serializers.DateField()
    supplier_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    lines = ImportLineSerializer(many=True, required=False)


# ==================== EXPORTS ====================

class StockExportSerializer(serializers.Serializer):
    export_date = serializers.DateField()
    purpose = serializers.CharField(max_length=200, required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=StockExport.Status.choices, required=False)
    lines = ExportLineSerializer(many=True, required=False)


class StockExportStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=StockExport.Status.choices)


# ==================== LOSSES ====================

class StockLossSerializer(serializers.Serializer):
    ingredient_id = serializers.IntegerField(min_value=1)
    quantity = serializers.DecimalField(**QUANTITY)
    reason = serializers.CharField(max_length=200, required=False, allow_blank=True)
    loss_date = serializers.DateField()
    employee_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
