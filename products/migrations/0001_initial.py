from __future__ import annotations

from decimal import Decimal

from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("kind", models.CharField(choices=[("physical", "Physical"), ("digital", "Digital")], default="physical", max_length=10)),
                ("status", models.CharField(choices=[("draft", "Draft"), ("active", "Active"), ("inactive", "Inactive")], default="draft", max_length=10)),
                ("title", models.CharField(max_length=160)),
                ("slug", models.SlugField(blank=True, max_length=180)),
                ("description", models.TextField(blank=True)),
                ("price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal("0.00"))])),
                ("compare_at_price", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True, validators=[django.core.validators.MinValueValidator(Decimal("0.00"))])),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("sku", models.CharField(blank=True, max_length=64)),
                ("quantity", models.PositiveIntegerField(default=0)),
                ("track_inventory", models.BooleanField(default=True)),
                ("tags", models.JSONField(blank=True, default=list)),
                ("options", models.JSONField(blank=True, default=list)),
                ("has_variants", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("category", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="products", to="catalog.category")),
                ("vendor", models.ForeignKey(help_text="The vendor who owns this listing.", on_delete=django.db.models.deletion.CASCADE, related_name="products", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["vendor", "status"], name="products_pr_vendor_3a9d1e_idx"),
                    models.Index(fields=["status", "created_at"], name="products_pr_status_b71c04_idx"),
                    models.Index(fields=["slug"], name="products_pr_slug_e52f88_idx"),
                ],
                "unique_together": {("vendor", "slug")},
            },
        ),
        migrations.CreateModel(
            name="ProductVariant",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("option1", models.CharField(blank=True, max_length=100, null=True)),
                ("option2", models.CharField(blank=True, max_length=100, null=True)),
                ("option3", models.CharField(blank=True, max_length=100, null=True)),
                ("title", models.CharField(max_length=320)),
                ("price", models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal("0.00"))])),
                ("compare_at_price", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True, validators=[django.core.validators.MinValueValidator(Decimal("0.00"))])),
                ("sku", models.CharField(blank=True, max_length=64)),
                ("barcode", models.CharField(blank=True, max_length=64)),
                ("quantity", models.PositiveIntegerField(default=0)),
                ("track_inventory", models.BooleanField(default=True)),
                ("weight", models.DecimalField(blank=True, decimal_places=3, max_digits=10, null=True, validators=[django.core.validators.MinValueValidator(Decimal("0"))])),
                ("weight_unit", models.CharField(choices=[("kg", "kg"), ("g", "g"), ("lb", "lb"), ("oz", "oz")], default="kg", max_length=2)),
                ("is_active", models.BooleanField(default=True)),
                ("position", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("product", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="variants", to="products.product")),
            ],
            options={
                "ordering": ["position", "id"],
                "indexes": [
                    models.Index(fields=["product", "position"], name="products_pr_product_1c9e27_idx"),
                    models.Index(fields=["product", "sku"], name="products_pr_product_6d0b53_idx"),
                    models.Index(fields=["product", "option1", "option2", "option3"], name="products_pr_product_a84f10_idx"),
                ],
            },
        ),
    ]
