from django.urls import path
from . import views

app_name = "stock"

urlpatterns = [
    path("ingredients/", views.IngredientListView.as_view(), name="ingredient-list"),
    path("ingredients/low-stock/", views.LowStockView.as_view(), name="ingredient-low-stock"),
    path("ingredients/<int:ingredient_id>/", views.IngredientDetailView.as_view(), name="ingredient-detail"),
    path("ingredients/<int:ingredient_id>/activate/", views.IngredientActivateView.as_view(), name="ingredient-activate"),

    path("imports/", views.StockImportListView.as_view(), name="import-list"),
    path("imports/<int:import_id>/", views.StockImportDetailView.as_view(), name="import-detail"),

    path("exports/", views.StockExportListView.as_view(), name="export-list"),
    path("exports/<int:export_id>/", views.StockExportDetailView.as_view(), name="export-detail"),
    path("exports/<int:export_id>/status/", views.StockExportStatusView.as_view(), name="export-status"),

    path("losses/", views.StockLossListView.as_view(), name="loss-list"),
    path("losses/<int:loss_id>/", views.StockLossDetailView.as_view(), name="loss-detail"),
]
