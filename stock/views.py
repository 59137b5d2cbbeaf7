import json
import logging

from django.http import JsonResponse
from django.views import View
from django.views.decorators.csrf import csrf_exempt
from django.utils.decorators import method_decorator

from stock.serializers import (
    validate_payload,
    IngredientSerializer,
    IngredientStatusSerializer,
    StockImportSerializer,
    StockExportSerializer,
    StockExportStatusSerializer,
    StockLossSerializer,
)
from stock.services import (
    ValidationError, NotFoundError, BusinessRuleError, InsufficientStockError,
    to_date,
    IngredientService,
    StockImportService,
    StockExportService,
    StockLossService,
)

logger = logging.getLogger(__name__)


def error_response(message: str, code: str = "error", status: int = 400, details: dict = None):
    data = {"success": False, "error": {"code": code, "message": message}}
    if details:
        data["error"]["details"] = details
    return JsonResponse(data, status=status)


def handle_service_error(e: Exception):
    if isinstance(e, ValidationError):
        details = {"field": e.field}
        if e.details:
            details.update(e.details)
        return error_response(str(e), "validation_error", 400, details)
    elif isinstance(e, NotFoundError):
        return error_response(str(e), "not_found", 404, e.details)
    elif isinstance(e, InsufficientStockError):
        return error_response(str(e), "insufficient_stock", 400, e.details)
    elif isinstance(e, BusinessRuleError):
        return error_response(str(e), "business_rule", 409, e.details)
    else:
        logger.exception(f"Unhandled stock error: {e}")
        return error_response("Internal server error", "server_error", 500)


class BaseStockView(View):
    @method_decorator(csrf_exempt)
    def dispatch(self, request, *args, **kwargs):
        return super().dispatch(request, *args, **kwargs)

    def get_json_body(self, request):
        try:
            data = json.loads(request.body) if request.body else {}
        except json.JSONDecodeError:
            raise ValidationError("Request body must be valid JSON")
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return data

    def get_document_body(self, request):
        data = self.get_json_body(request)
        # Older clients send document lines under "details"
        if "lines" not in data and "details" in data:
            data["lines"] = data.pop("details")
        return data

    def get_user_id(self, request):
        if request.user.is_authenticated:
            return request.user.id
        return None

    def get_page(self, request):
        try:
            page = int(request.GET.get("page", 1))
            per_page = int(request.GET.get("per_page", 20))
        except ValueError:
            raise ValidationError("page and per_page must be integers", "page")
        return page, per_page

    def get_int_param(self, request, name):
        value = request.GET.get(name)
        if value in (None, ""):
            return None
        try:
            return int(value)
        except ValueError:
            raise ValidationError(f"{name} must be an integer", name)

    def get_date_param(self, request, name):
        value = request.GET.get(name)
        if not value:
            return None
        return to_date(value, name)

    def get_bool_param(self, request, name):
        value = request.GET.get(name)
        if value in (None, ""):
            return None
        return value.lower() in ("1", "true", "yes")

    def success(self, data: dict, status: int = 200):
        return JsonResponse({"success": True, **data}, status=status)


# ==================== INGREDIENTS ====================

class IngredientListView(BaseStockView):

    def get(self, request):
        try:
            page, per_page = self.get_page(request)
            result = IngredientService.list(
                page=page,
                per_page=per_page,
                name=request.GET.get("name"),
                unit=request.GET.get("unit"),
                is_active=self.get_bool_param(request, "is_active"),
                low_stock=bool(self.get_bool_param(request, "low_stock")),
                category_id=self.get_int_param(request, "category_id"),
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)

    def post(self, request):
        try:
            data = validate_payload(IngredientSerializer, self.get_json_body(request))
            result = IngredientService.create(user_id=self.get_user_id(request), **data)
            return self.success(result, 201)
        except Exception as e:
            return handle_service_error(e)


class IngredientDetailView(BaseStockView):

    def get(self, request, ingredient_id):
        try:
            result = IngredientService.get(ingredient_id)
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)

    def put(self, request, ingredient_id):
        try:
            body = self.get_json_body(request)
            if "current_stock" in body:
                raise ValidationError(
                    "current_stock can only change through imports, exports and losses",
                    "current_stock"
                )
            data = validate_payload(IngredientSerializer, body, partial=True)
            result = IngredientService.update(ingredient_id, user_id=self.get_user_id(request), **data)
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)

    def delete(self, request, ingredient_id):
        try:
            result = IngredientService.delete(ingredient_id, user_id=self.get_user_id(request))
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


class IngredientActivateView(BaseStockView):

    def patch(self, request, ingredient_id):
        try:
            data = validate_payload(IngredientStatusSerializer, self.get_json_body(request))
            result = IngredientService.set_active(
                ingredient_id, data["is_active"], user_id=self.get_user_id(request)
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


class LowStockView(BaseStockView):

    def get(self, request):
        try:
            result = IngredientService.low_stock_alerts()
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


# ==================== IMPORTS ====================

class StockImportListView(BaseStockView):

    def get(self, request):
        try:
            page, per_page = self.get_page(request)
            result = StockImportService.list(
                page=page,
                per_page=per_page,
                date_from=self.get_date_param(request, "date_from"),
                date_to=self.get_date_param(request, "date_to"),
                supplier_id=self.get_int_param(request, "supplier_id"),
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)

    def post(self, request):
        try:
            data = validate_payload(StockImportSerializer, self.get_document_body(request))
            result = StockImportService.create(user_id=self.get_user_id(request), **data)
            return self.success(result, 201)
        except Exception as e:
            return handle_service_error(e)


class StockImportDetailView(BaseStockView):

    def get(self, request, import_id):
        try:
            result = StockImportService.get(import_id)
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)

    def put(self, request, import_id):
        try:
            data = validate_payload(StockImportSerializer, self.get_document_body(request), partial=True)
            result = StockImportService.update(import_id, user_id=self.get_user_id(request), **data)
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)

    def delete(self, request, import_id):
        try:
            result = StockImportService.delete(import_id, user_id=self.get_user_id(request))
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


# ==================== EXPORTS ====================

class StockExportListView(BaseStockView):

    def get(self, request):
        try:
            page, per_page = self.get_page(request)
            result = StockExportService.list(
                page=page,
                per_page=per_page,
                date_from=self.get_date_param(request, "date_from"),
                date_to=self.get_date_param(request, "date_to"),
                status=self.get_int_param(request, "status"),
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)

    def post(self, request):
        try:
            data = validate_payload(StockExportSerializer, self.get_document_body(request))
            result = StockExportService.create(user_id=self.get_user_id(request), **data)
            return self.success(result, 201)
        except Exception as e:
            return handle_service_error(e)


class StockExportDetailView(BaseStockView):

    def get(self, request, export_id):
        try:
            result = StockExportService.get(export_id)
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)

    def put(self, request, export_id):
        try:
            data = validate_payload(StockExportSerializer, self.get_document_body(request), partial=True)
            result = StockExportService.update(export_id, user_id=self.get_user_id(request), **data)
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)

    def delete(self, request, export_id):
        try:
            result = StockExportService.delete(export_id, user_id=self.get_user_id(request))
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


class StockExportStatusView(BaseStockView):

    def patch(self, request, export_id):
        try:
            data = validate_payload(StockExportStatusSerializer, self.get_json_body(request))
            result = StockExportService.set_status(
                export_id, data["status"], user_id=self.get_user_id(request)
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


# ==================== LOSSES ====================

class StockLossListView(BaseStockView):

    def get(self, request):
        try:
            page, per_page = self.get_page(request)
            result = StockLossService.list(
                page=page,
                per_page=per_page,
                date_from=self.get_date_param(request, "date_from"),
                date_to=self.get_date_param(request, "date_to"),
                ingredient_id=self.get_int_param(request, "ingredient_id"),
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)

    def post(self, request):
        try:
            data = validate_payload(StockLossSerializer, self.get_json_body(request))
            result = StockLossService.create(user_id=self.get_user_id(request), **data)
            return self.success(result, 201)
        except Exception as e:
            return handle_service_error(e)


class StockLossDetailView(BaseStockView):

    def get(self, request, loss_id):
        try:
            result = StockLossService.get(loss_id)
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)

    def put(self, request, loss_id):
        try:
            data = validate_payload(StockLossSerializer, self.get_json_body(request), partial=True)
            result = StockLossService.update(loss_id, user_id=self.get_user_id(request), **data)
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)

    def delete(self, request, loss_id):
        try:
            result = StockLossService.delete(loss_id, user_id=self.get_user_id(request))
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)
