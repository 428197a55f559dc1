# bulkops/models.py
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from core.utils import get_setting_int


class BulkOperation(models.Model):
    class Type(models.TextChoices):
        PRICE_UPDATE = "price_update", "Price update"
        INVENTORY_UPDATE = "inventory_update", "Inventory update"
        STATUS_UPDATE = "status_update", "Status update"
        DELETE = "delete", "Delete"
        CATEGORY_UPDATE = "category_update", "Category update"
        TAG_UPDATE = "tag_update", "Tag update"
        CSV_IMPORT = "csv_import", "CSV import"
        CSV_EXPORT = "csv_export", "CSV export"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        PROCESSING = "processing", "Processing"
        COMPLETED = "completed", "Completed"
        FAILED = "failed", "Failed"
        CANCELLED = "cancelled", "Cancelled"

    CANCELLABLE_STATUSES = (Status.PENDING, Status.PROCESSING)
    FINISHED_STATUSES = (Status.COMPLETED, Status.FAILED, Status.CANCELLED)

    vendor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bulk_operations",
    )
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="requested_bulk_operations",
    )

    type = models.CharField(max_length=32, choices=Type.choices)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)

    product_ids = models.JSONField(default=list, blank=True)
    product_count = models.PositiveIntegerField(default=0)

    # price_change/price_value, inventory_change/inventory_value, new_status,
    # new_category, tags_to_add/tags_to_remove
    operation_data = models.JSONField(default=dict, blank=True)

    processed_count = models.PositiveIntegerField(default=0)
    succeeded_count = models.PositiveIntegerField(default=0)
    failed_count = models.PositiveIntegerField(default=0)
    skipped_count = models.PositiveIntegerField(default=0)
    percentage = models.PositiveSmallIntegerField(default=0)

    # [{"product_id", "sku", "message", "row"}], newest last
    errors = models.JSONField(default=list, blank=True)

    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    result_file_url = models.URLField(max_length=500, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["vendor", "status"], name="bulkops_bul_vendor_5e2a90_idx"),
            models.Index(fields=["vendor", "-created_at"], name="bulkops_bul_vendor_c17b3d_idx"),
            models.Index(fields=["status", "created_at"], name="bulkops_bul_status_82f4e6_idx"),
        ]

    def __str__(self) -> str:
        return f"BulkOperation #{self.pk} {self.type} ({self.status})"

    # ----------------------------
    # State
    # ----------------------------
    @property
    def is_cancellable(self) -> bool:
        return self.status in self.CANCELLABLE_STATUSES

    @property
    def is_complete(self) -> bool:
        return self.status in self.FINISHED_STATUSES

    @property
    def duration_seconds(self) -> Optional[int]:
        if not (self.started_at and self.completed_at):
            return None
        return round((self.completed_at - self.started_at).total_seconds())

    def start_processing(self) -> bool:
        """Claim a pending operation; False when it was cancelled or already claimed."""
        now = timezone.now()
        claimed = BulkOperation.objects.filter(pk=self.pk, status=self.Status.PENDING).update(
            status=self.Status.PROCESSING,
            started_at=now,
            updated_at=now,
        )
        if claimed:
            self.status = self.Status.PROCESSING
            self.started_at = now
        else:
            self.refresh_from_db(fields=["status", "started_at"])
        return bool(claimed)

    def update_progress(self, processed: int, succeeded: int, failed: int, skipped: int = 0) -> None:
        self.processed_count = processed
        self.succeeded_count = succeeded
        self.failed_count = failed
        self.skipped_count = skipped
        total = self.product_count or 1
        self.percentage = int((Decimal(processed) * 100 / total).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        # Progress only; status may have been changed by a concurrent cancel.
        self.save(
            update_fields=[
                "processed_count",
                "succeeded_count",
                "failed_count",
                "skipped_count",
                "percentage",
                "updated_at",
            ]
        )

    def add_error(
        self,
        product_id: Any,
        message: str,
        *,
        sku: Optional[str] = None,
        row: Optional[int] = None,
    ) -> None:
        limit = get_setting_int("MARKET_BULK_MAX_ERRORS", 1000)
        errors = list(self.errors or [])
        errors.append({"product_id": product_id, "sku": sku, "message": message, "row": row})
        self.errors = errors[-limit:]
        self.save(update_fields=["errors", "updated_at"])

    def _finish(self, status: str, *, extra: Optional[dict] = None) -> bool:
        """Move to a final status unless a concurrent cancel got there first."""
        now = timezone.now()
        fields = {"status": status, "completed_at": now, "updated_at": now, **(extra or {})}
        updated = BulkOperation.objects.filter(pk=self.pk, status__in=self.CANCELLABLE_STATUSES).update(**fields)
        if updated:
            for key, value in fields.items():
                setattr(self, key, value)
        else:
            self.refresh_from_db(fields=["status", "completed_at"])
        return bool(updated)

    def complete(self, result_file_url: str = "") -> bool:
        extra: dict[str, Any] = {"percentage": 100}
        if result_file_url:
            extra["result_file_url"] = result_file_url
        return self._finish(self.Status.COMPLETED, extra=extra)

    def fail(self, message: str) -> bool:
        limit = get_setting_int("MARKET_BULK_MAX_ERRORS", 1000)
        errors = list(self.errors or []) + [{"product_id": None, "sku": None, "message": message, "row": None}]
        self.errors = errors[-limit:]
        return self._finish(self.Status.FAILED, extra={"errors": self.errors})

    def cancel(self) -> None:
        if not self._finish(self.Status.CANCELLED):
            raise ValidationError("Cannot cancel completed or failed operation")

    def was_cancelled(self) -> bool:
        current = BulkOperation.objects.filter(pk=self.pk).values_list("status", flat=True).first()
        return current == self.Status.CANCELLED

    # ----------------------------
    # Serialization
    # ----------------------------
    @property
    def progress(self) -> dict:
        return {
            "processed": self.processed_count,
            "succeeded": self.succeeded_count,
            "failed": self.failed_count,
            "skipped": self.skipped_count,
            "percentage": self.percentage,
        }

    def summary(self) -> dict:
        return {
            "id": self.pk,
            "type": self.type,
            "status": self.status,
            "product_count": self.product_count,
            "progress": self.progress,
            "error_count": len(self.errors or []),
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "duration": self.duration_seconds,
        }
