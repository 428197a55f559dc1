# products/models.py
from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.text import slugify

if TYPE_CHECKING:
    from downloads.models import DigitalAsset


class Product(models.Model):
    if TYPE_CHECKING:
        variants: models.Manager["ProductVariant"]
        digital_assets: models.Manager["DigitalAsset"]

    class Kind(models.TextChoices):
        PHYSICAL = "physical", "Physical"
        DIGITAL = "digital", "Digital"

    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        ACTIVE = "active", "Active"
        INACTIVE = "inactive", "Inactive"

    vendor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="products",
        help_text="The vendor who owns this listing.",
    )
    kind = models.CharField(max_length=10, choices=Kind.choices, default=Kind.PHYSICAL)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.DRAFT)

    title = models.CharField(max_length=160)
    slug = models.SlugField(max_length=180, blank=True)
    description = models.TextField(blank=True)

    category = models.ForeignKey(
        "catalog.Category",
        on_delete=models.SET_NULL,
        related_name="products",
        null=True,
        blank=True,
    )

    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    compare_at_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    currency = models.CharField(max_length=3, default="USD")

    sku = models.CharField(max_length=64, blank=True)
    quantity = models.PositiveIntegerField(default=0)
    track_inventory = models.BooleanField(default=True)

    # ["gift", "summer"]
    tags = models.JSONField(default=list, blank=True)

    # [{"name": "Size", "values": ["S", "M"]}], at most three entries
    options = models.JSONField(default=list, blank=True)
    has_variants = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = (("vendor", "slug"),)
        indexes = [
            models.Index(fields=["vendor", "status"], name="products_pr_vendor_3a9d1e_idx"),
            models.Index(fields=["status", "created_at"], name="products_pr_status_b71c04_idx"),
            models.Index(fields=["slug"], name="products_pr_slug_e52f88_idx"),
        ]
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.title} ({self.get_kind_display()})"

    @classmethod
    def generate_unique_slug(
        cls,
        *,
        vendor_id: int,
        title: str,
        max_length: int = 180,
        exclude_pk: int | None = None,
    ) -> str:
        """
        Unique slug per vendor with numeric suffixes: cup, cup-2, cup-3, ...
        """
        base = slugify(title) or "item"
        base = base[:max_length].strip("-") or "item"

        qs = cls.objects.filter(vendor_id=vendor_id)
        if exclude_pk is not None:
            qs = qs.exclude(pk=exclude_pk)

        if not qs.filter(slug=base).exists():
            return base

        # Reserve room for "-NNNN"
        room = max(1, max_length - 6)
        base_trim = base[:room].strip("-") or "item"

        counter = 2
        while True:
            candidate = f"{base_trim}-{counter}"[:max_length].strip("-")
            if not qs.filter(slug=candidate).exists():
                return candidate
            counter += 1

    def save(self, *args, **kwargs):
        if not self.slug and self.vendor_id:
            self.slug = Product.generate_unique_slug(
                vendor_id=int(self.vendor_id),
                title=(self.title or "").strip(),
                exclude_pk=self.pk,
            )
        super().save(*args, **kwargs)

    @property
    def is_active(self) -> bool:
        return self.status == self.Status.ACTIVE

    @property
    def is_digital(self) -> bool:
        return self.kind == self.Kind.DIGITAL

    def storefront_path(self, slug: str | None = None) -> str:
        return f"/shop/{self.vendor_id}/{slug or self.slug}"

    def as_dict(self) -> dict:
        return {
            "id": self.pk,
            "vendor_id": self.vendor_id,
            "kind": self.kind,
            "status": self.status,
            "title": self.title,
            "slug": self.slug,
            "description": self.description,
            "category_id": self.category_id,
            "price": self.price,
            "compare_at_price": self.compare_at_price,
            "currency": self.currency,
            "sku": self.sku,
            "quantity": self.quantity,
            "track_inventory": self.track_inventory,
            "tags": list(self.tags or []),
            "options": list(self.options or []),
            "has_variants": self.has_variants,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class ProductVariant(models.Model):
    class WeightUnit(models.TextChoices):
        KG = "kg", "kg"
        G = "g", "g"
        LB = "lb", "lb"
        OZ = "oz", "oz"

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="variants")

    # Up to three option values, matching Product.options by position.
    option1 = models.CharField(max_length=100, null=True, blank=True)
    option2 = models.CharField(max_length=100, null=True, blank=True)
    option3 = models.CharField(max_length=100, null=True, blank=True)

    # "Red / Large / Cotton"
    title = models.CharField(max_length=320)

    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    compare_at_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    sku = models.CharField(max_length=64, blank=True)
    barcode = models.CharField(max_length=64, blank=True)
    quantity = models.PositiveIntegerField(default=0)
    track_inventory = models.BooleanField(default=True)

    weight = models.DecimalField(
        max_digits=10,
        decimal_places=3,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0"))],
    )
    weight_unit = models.CharField(max_length=2, choices=WeightUnit.choices, default=WeightUnit.KG)

    is_active = models.BooleanField(default=True)
    position = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["position", "id"]
        indexes = [
            models.Index(fields=["product", "position"], name="products_pr_product_1c9e27_idx"),
            models.Index(fields=["product", "sku"], name="products_pr_product_6d0b53_idx"),
            models.Index(fields=["product", "option1", "option2", "option3"], name="products_pr_product_a84f10_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.product.title} :: {self.title}"

    @staticmethod
    def build_title(*values: str | None) -> str:
        parts = [v for v in values if v]
        return " / ".join(parts) if parts else "Default"

    def save(self, *args, **kwargs):
        self.title = self.build_title(self.option1, self.option2, self.option3)
        super().save(*args, **kwargs)

    @property
    def is_in_stock(self) -> bool:
        if not self.track_inventory:
            return True
        return self.quantity > 0

    def as_dict(self) -> dict:
        return {
            "id": self.pk,
            "product_id": self.product_id,
            "option1": self.option1,
            "option2": self.option2,
            "option3": self.option3,
            "title": self.title,
            "price": self.price,
            "compare_at_price": self.compare_at_price,
            "sku": self.sku,
            "barcode": self.barcode,
            "quantity": self.quantity,
            "track_inventory": self.track_inventory,
            "weight": self.weight,
            "weight_unit": self.weight_unit,
            "is_active": self.is_active,
            "is_in_stock": self.is_in_stock,
            "position": self.position,
        }
