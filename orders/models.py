# orders/models.py

from __future__ import annotations

import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


def _new_order_number() -> str:
    return f"ORD-{uuid.uuid4().hex[:10].upper()}"


class Order(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        PAID = "paid", "Paid"
        PROCESSING = "processing", "Processing"
        SHIPPED = "shipped", "Shipped"
        DELIVERED = "delivered", "Delivered"
        COMPLETED = "completed", "Completed"
        CANCELLED = "cancelled", "Cancelled"
        REFUNDED = "refunded", "Refunded"

    # Orders whose digital assets may be downloaded.
    DOWNLOAD_STATUSES = (Status.DELIVERED, Status.COMPLETED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(max_length=20, unique=True, default=_new_order_number, editable=False)

    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )

    status = models.CharField(max_length=24, choices=Status.choices, default=Status.PENDING)
    currency = models.CharField(max_length=8, default="usd")

    subtotal_cents = models.PositiveIntegerField(default=0)
    tax_cents = models.PositiveIntegerField(default=0)
    shipping_cents = models.PositiveIntegerField(default=0)
    total_cents = models.PositiveIntegerField(default=0)

    paid_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["customer", "-created_at"], name="orders_orde_custome_0f3a2b_idx"),
            models.Index(fields=["status", "-created_at"], name="orders_orde_status_9e71c5_idx"),
        ]

    def __str__(self) -> str:
        return f"Order {self.order_number} ({self.status})"

    @property
    def is_download_eligible(self) -> bool:
        return self.status in self.DOWNLOAD_STATUSES

    def recompute_totals(self) -> None:
        self.subtotal_cents = sum(int(oi.line_total_cents) for oi in self.items.all())
        self.total_cents = int(self.subtotal_cents + self.tax_cents + self.shipping_cents)

    def set_status(self, status: str, *, note: str = "") -> bool:
        if status == self.status:
            return False
        previous = self.status
        self.status = status
        update_fields = ["status", "updated_at"]
        if status == self.Status.PAID and not self.paid_at:
            self.paid_at = timezone.now()
            update_fields.append("paid_at")
        self.save(update_fields=update_fields)
        OrderEvent.objects.create(
            order=self,
            type=OrderEvent.Type.STATUS_CHANGED,
            message=note or f"{previous} -> {status}",
        )
        return True

    def as_dict(self) -> dict:
        return {
            "id": str(self.pk),
            "order_number": self.order_number,
            "status": self.status,
            "currency": self.currency,
            "subtotal_cents": self.subtotal_cents,
            "tax_cents": self.tax_cents,
            "shipping_cents": self.shipping_cents,
            "total_cents": self.total_cents,
            "paid_at": self.paid_at,
            "created_at": self.created_at,
            "is_download_eligible": self.is_download_eligible,
            "items": [oi.as_dict() for oi in self.items.all()],
        }


class OrderItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")

    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    variant = models.ForeignKey(
        "products.ProductVariant",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
    )

    vendor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="sold_order_items",
        help_text="Vendor snapshot at time of purchase.",
    )

    title = models.CharField(max_length=320, blank=True, default="")
    quantity = models.PositiveIntegerField(default=1)
    unit_price_cents = models.PositiveIntegerField(default=0)
    is_digital = models.BooleanField(default=False)

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=["order", "created_at"], name="orders_orde_order_i_4b8d61_idx"),
            models.Index(fields=["product", "created_at"], name="orders_orde_product_7a2c19_idx"),
            models.Index(fields=["vendor", "created_at"], name="orders_orde_vendor__c3e5f0_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.quantity} × {self.product_id}"

    @property
    def line_total_cents(self) -> int:
        return int(self.quantity) * int(self.unit_price_cents)

    def as_dict(self) -> dict:
        return {
            "id": str(self.pk),
            "product_id": self.product_id,
            "variant_id": self.variant_id,
            "vendor_id": self.vendor_id,
            "title": self.title,
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "line_total_cents": self.line_total_cents,
            "is_digital": self.is_digital,
        }


class OrderEvent(models.Model):
    class Type(models.TextChoices):
        CREATED = "created", "Created"
        STATUS_CHANGED = "status_changed", "Status changed"
        DOWNLOAD = "download", "Download issued"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="events")
    type = models.CharField(max_length=64, choices=Type.choices)
    message = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [models.Index(fields=["order", "-created_at"], name="orders_orde_order_i_e09a7d_idx")]

    def __str__(self) -> str:
        return f"{self.type} ({self.created_at:%Y-%m-%d %H:%M})"
