from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db import models


class AuditedModel(models.Model):
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class IngredientCategory(AuditedModel):
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "ingredient_categories"
        ordering = ["name"]
        verbose_name_plural = "ingredient categories"

    def __str__(self):
        return self.name


class Supplier(AuditedModel):
    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=20, blank=True, default="")
    contact_person_name = models.CharField(max_length=100, blank=True, default="")
    contact_person_phone = models.CharField(max_length=20, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    address = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "suppliers"
        ordering = ["name"]

    def __str__(self):
        return self.name


class Ingredient(AuditedModel):
    name = models.CharField(max_length=100, unique=True)
    unit = models.CharField(max_length=20)
    category = models.ForeignKey(
        IngredientCategory,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="ingredients",
    )
    # Written only through LedgerService (F() increments)
    current_stock = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    min_stock = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    max_stock = models.DecimalField(max_digits=18, decimal_places=2, null=True, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "ingredients"
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.unit})"

    @property
    def is_below_min_stock(self) -> bool:
        return self.current_stock < self.min_stock

    @property
    def is_above_max_stock(self) -> bool:
        return self.max_stock is not None and self.current_stock > self.max_stock


class StockImport(AuditedModel):
    import_date = models.DateField()
    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_imports",
    )
    total_amount = models.DecimalField(max_digits=18, decimal_places=2, default=0)

    class Meta:
        db_table = "stock_imports"
        ordering = ["-import_date", "-id"]

    def __str__(self):
        return f"Import #{self.pk} ({self.import_date})"


class StockImportDetail(AuditedModel):
    stock_import = models.ForeignKey(
        StockImport, on_delete=models.CASCADE, related_name="details"
    )
    ingredient = models.ForeignKey(
        Ingredient, on_delete=models.PROTECT, related_name="import_details"
    )
    ordered_quantity = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    received_quantity = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    unit_price = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    total_price = models.DecimalField(max_digits=18, decimal_places=2, default=0)

    class Meta:
        db_table = "stock_import_details"
        ordering = ["id"]

    def __str__(self):
        return f"{self.ingredient} x {self.received_quantity}"

    def save(self, *args, **kwargs):
        self.total_price = (Decimal(self.received_quantity) * Decimal(self.unit_price)).quantize(
            Decimal("0.01"), rounding=ROUND_HALF_UP
        )
        super().save(*args, **kwargs)


class StockExport(AuditedModel):
    class Status(models.IntegerChoices):
        DRAFT = 0, "Draft"
        APPROVED = 1, "Approved"
        COMPLETED = 2, "Completed"

    export_date = models.DateField()
    purpose = models.CharField(max_length=200, blank=True, default="")
    status = models.PositiveSmallIntegerField(
        choices=Status.choices, default=Status.DRAFT
    )

    class Meta:
        db_table = "stock_exports"
        ordering = ["-export_date", "-id"]

    def __str__(self):
        return f"Export #{self.pk} ({self.get_status_display()})"

    @property
    def status_label(self) -> str:
        return self.get_status_display()

    @property
    def is_completed(self) -> bool:
        return self.status == self.Status.COMPLETED


class StockExportDetail(AuditedModel):
    stock_export = models.ForeignKey(
        StockExport, on_delete=models.CASCADE, related_name="details"
    )
    ingredient = models.ForeignKey(
        Ingredient, on_delete=models.PROTECT, related_name="export_details"
    )
    quantity = models.DecimalField(max_digits=18, decimal_places=2, default=0)

    class Meta:
        db_table = "stock_export_details"
        ordering = ["id"]

    def __str__(self):
        return f"{self.ingredient} x {self.quantity}"


class StockLoss(AuditedModel):
    ingredient = models.ForeignKey(
        Ingredient, on_delete=models.PROTECT, related_name="losses"
    )
    quantity = models.DecimalField(max_digits=18, decimal_places=2)
    reason = models.CharField(max_length=200, blank=True, default="")
    loss_date = models.DateField()
    employee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="recorded_stock_losses",
    )

    class Meta:
        db_table = "stock_losses"
        ordering = ["-loss_date", "-id"]

    def __str__(self):
        return f"Loss of {self.quantity} {self.ingredient.unit} {self.ingredient.name}"
