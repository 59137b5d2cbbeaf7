from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="IngredientCategory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("updated_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("name", models.CharField(max_length=100)),
                ("description", models.TextField(blank=True, default="")),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "db_table": "ingredient_categories",
                "ordering": ["name"],
                "verbose_name_plural": "ingredient categories",
            },
        ),
        migrations.CreateModel(
            name="Supplier",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("updated_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("name", models.CharField(max_length=200)),
                ("phone", models.CharField(blank=True, default="", max_length=20)),
                ("contact_person_name", models.CharField(blank=True, default="", max_length=100)),
                ("contact_person_phone", models.CharField(blank=True, default="", max_length=20)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("address", models.TextField(blank=True, default="")),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "db_table": "suppliers",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Ingredient",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("updated_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("name", models.CharField(max_length=100, unique=True)),
                ("unit", models.CharField(max_length=20)),
                ("category", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="ingredients", to="stock.ingredientcategory")),
                ("current_stock", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("min_stock", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("max_stock", models.DecimalField(blank=True, decimal_places=2, max_digits=18, null=True)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "db_table": "ingredients",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="StockImport",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("updated_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("import_date", models.DateField()),
                ("supplier", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="stock_imports", to="stock.supplier")),
                ("total_amount", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
            ],
            options={
                "db_table": "stock_imports",
                "ordering": ["-import_date", "-id"],
            },
        ),
        migrations.CreateModel(
            name="StockImportDetail",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("updated_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("stock_import", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="details", to="stock.stockimport")),
                ("ingredient", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="import_details", to="stock.ingredient")),
                ("ordered_quantity", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("received_quantity", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("unit_price", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("total_price", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
            ],
            options={
                "db_table": "stock_import_details",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="StockExport",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("updated_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("export_date", models.DateField()),
                ("purpose", models.CharField(blank=True, default="", max_length=200)),
                ("status", models.PositiveSmallIntegerField(choices=[(0, "Draft"), (1, "Approved"), (2, "Completed")], default=0)),
            ],
            options={
                "db_table": "stock_exports",
                "ordering": ["-export_date", "-id"],
            },
        ),
        migrations.CreateModel(
            name="StockExportDetail",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("updated_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("stock_export", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="details", to="stock.stockexport")),
                ("ingredient", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="export_details", to="stock.ingredient")),
                ("quantity", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
            ],
            options={
                "db_table": "stock_export_details",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="StockLoss",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("updated_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("ingredient", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="losses", to="stock.ingredient")),
                ("quantity", models.DecimalField(decimal_places=2, max_digits=18)),
                ("reason", models.CharField(blank=True, default="", max_length=200)),
                ("loss_date", models.DateField()),
                ("employee", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="recorded_stock_losses", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "stock_losses",
                "ordering": ["-loss_date", "-id"],
            },
        ),
    ]
