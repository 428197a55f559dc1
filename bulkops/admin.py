from __future__ import annotations

from django.contrib import admin

from .models import BulkOperation


@admin.register(BulkOperation)
class BulkOperationAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "vendor",
        "type",
        "status",
        "product_count",
        "processed_count",
        "failed_count",
        "percentage",
        "created_at",
    )
    list_filter = ("type", "status")
    search_fields = ("vendor__username", "requested_by__username")
    readonly_fields = (
        "product_ids",
        "operation_data",
        "errors",
        "processed_count",
        "succeeded_count",
        "failed_count",
        "skipped_count",
        "percentage",
        "started_at",
        "completed_at",
        "created_at",
        "updated_at",
    )
