from __future__ import annotations

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
            name="BulkOperation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("type", models.CharField(choices=[("price_update", "Price update"), ("inventory_update", "Inventory update"), ("status_update", "Status update"), ("delete", "Delete"), ("category_update", "Category update"), ("tag_update", "Tag update"), ("csv_import", "CSV import"), ("csv_export", "CSV export")], max_length=32)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("processing", "Processing"), ("completed", "Completed"), ("failed", "Failed"), ("cancelled", "Cancelled")], default="pending", max_length=16)),
                ("product_ids", models.JSONField(blank=True, default=list)),
                ("product_count", models.PositiveIntegerField(default=0)),
                ("operation_data", models.JSONField(blank=True, default=dict)),
                ("processed_count", models.PositiveIntegerField(default=0)),
                ("succeeded_count", models.PositiveIntegerField(default=0)),
                ("failed_count", models.PositiveIntegerField(default=0)),
                ("skipped_count", models.PositiveIntegerField(default=0)),
                ("percentage", models.PositiveSmallIntegerField(default=0)),
                ("errors", models.JSONField(blank=True, default=list)),
                ("started_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("result_file_url", models.URLField(blank=True, default="", max_length=500)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("requested_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="requested_bulk_operations", to=settings.AUTH_USER_MODEL)),
                ("vendor", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="bulk_operations", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["vendor", "status"], name="bulkops_bul_vendor_5e2a90_idx"),
                    models.Index(fields=["vendor", "-created_at"], name="bulkops_bul_vendor_c17b3d_idx"),
                    models.Index(fields=["status", "created_at"], name="bulkops_bul_status_82f4e6_idx"),
                ],
            },
        ),
    ]
