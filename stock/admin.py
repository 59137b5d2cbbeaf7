from django.contrib import admin
from django.utils.html import format_html
from django.utils.translation import gettext_lazy as _
from django.urls import reverse
from unfold.admin import ModelAdmin, TabularInline
from unfold.decorators import display
from unfold.contrib.filters.admin import RangeDateFilter, RangeNumericFilter

from .models import (
    IngredientCategory, Supplier, Ingredient,
    StockImport, StockImportDetail, StockExport, StockExportDetail, StockLoss,
)


class ReadOnlyLedgerMixin:
    """Stock documents change stock, so they are only edited through the API services."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(IngredientCategory)
class IngredientCategoryAdmin(ModelAdmin):
    list_display = ['id', 'name', 'status_badge', 'ingredient_count', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name', 'description']
    readonly_fields = ['created_by', 'updated_by', 'created_at', 'updated_at']

    @display(description=_("Status"), label=True)
    def status_badge(self, obj):
        if obj.is_active:
            return 'success', _("Active")
        return 'warning', _("Inactive")

    @display(description=_("Ingredients"))
    def ingredient_count(self, obj):
        return obj.ingredients.count()


@admin.register(Supplier)
class SupplierAdmin(ModelAdmin):
    list_display = ['id', 'name', 'phone', 'contact_person_name', 'email', 'is_active']
    list_filter = ['is_active']
    search_fields = ['name', 'phone', 'contact_person_name', 'email']
    readonly_fields = ['created_by', 'updated_by', 'created_at', 'updated_at']

    fieldsets = (
        (_('Supplier'), {
            'fields': ('name', 'phone', 'email', 'address', 'is_active')
        }),
        (_('Contact Person'), {
            'fields': ('contact_person_name', 'contact_person_phone')
        }),
        (_('Audit'), {
            'fields': ('created_by', 'updated_by', 'created_at', 'updated_at')
        }),
    )


@admin.register(Ingredient)
class IngredientAdmin(ModelAdmin):
    list_display = ['id', 'name', 'unit', 'category', 'current_stock', 'min_stock', 'max_stock', 'stock_badge']
    list_filter = [
        'is_active',
        'category',
        ('current_stock', RangeNumericFilter),
    ]
    search_fields = ['name']
    list_filter_submit = True
    list_fullwidth = True
    readonly_fields = ['current_stock', 'created_by', 'updated_by', 'created_at', 'updated_at']

    fieldsets = (
        (_('Ingredient'), {
            'fields': ('name', 'unit', 'category', 'is_active')
        }),
        (_('Stock'), {
            'fields': ('current_stock', 'min_stock', 'max_stock')
        }),
        (_('Audit'), {
            'fields': ('created_by', 'updated_by', 'created_at', 'updated_at')
        }),
    )

    def save_model(self, request, obj, form, change):
        obj.updated_by = request.user
        if not change:
            obj.created_by = request.user
            obj.save()
            return
        # Never write current_stock back from the form instance
        obj.save(update_fields=[
            f.name for f in obj._meta.concrete_fields
            if f.name not in ('id', 'current_stock', 'created_at', 'created_by')
        ])

    @display(description=_("Stock level"), label=True)
    def stock_badge(self, obj):
        if obj.is_below_min_stock:
            return 'danger', _("Low")
        if obj.is_above_max_stock:
            return 'warning', _("Over")
        return 'success', _("OK")


class StockImportDetailInline(ReadOnlyLedgerMixin, TabularInline):
    model = StockImportDetail
    extra = 0
    fields = ('ingredient', 'ordered_quantity', 'received_quantity', 'unit_price', 'total_price')
    readonly_fields = fields


@admin.register(StockImport)
class StockImportAdmin(ReadOnlyLedgerMixin, ModelAdmin):
    list_display = ['id', 'import_date', 'supplier_link', 'total_amount', 'line_count', 'created_by']
    list_filter = [
        ('import_date', RangeDateFilter),
        'supplier',
    ]
    list_filter_submit = True
    inlines = [StockImportDetailInline]

    @display(description=_("Supplier"))
    def supplier_link(self, obj):
        if not obj.supplier_id:
            return "-"
        url = reverse('admin:stock_supplier_change', args=[obj.supplier_id])
        return format_html('<a href="{}">{}</a>', url, obj.supplier.name)

    @display(description=_("Lines"))
    def line_count(self, obj):
        return obj.details.count()


class StockExportDetailInline(ReadOnlyLedgerMixin, TabularInline):
    model = StockExportDetail
    extra = 0
    fields = ('ingredient', 'quantity')
    readonly_fields = fields


@admin.register(StockExport)
class StockExportAdmin(ReadOnlyLedgerMixin, ModelAdmin):
    list_display = ['id', 'export_date', 'purpose', 'status_badge', 'line_count', 'created_by']
    list_filter = [
        'status',
        ('export_date', RangeDateFilter),
    ]
    search_fields = ['purpose']
    list_filter_submit = True
    inlines = [StockExportDetailInline]

    @display(description=_("Status"), label=True)
    def status_badge(self, obj):
        colors = {
            StockExport.Status.DRAFT: 'info',
            StockExport.Status.APPROVED: 'warning',
            StockExport.Status.COMPLETED: 'success',
        }
        return colors.get(obj.status, 'info'), obj.status_label

    @display(description=_("Lines"))
    def line_count(self, obj):
        return obj.details.count()


@admin.register(StockLoss)
class StockLossAdmin(ReadOnlyLedgerMixin, ModelAdmin):
    list_display = ['id', 'loss_date', 'ingredient', 'quantity', 'reason', 'employee']
    list_filter = [
        ('loss_date', RangeDateFilter),
        'ingredient',
    ]
    search_fields = ['reason', 'ingredient__name']
    list_filter_submit = True
