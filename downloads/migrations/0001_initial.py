from __future__ import annotations

import uuid

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion

import core.storage_backends


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("orders", "0001_initial"),
        ("products", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="DigitalAsset",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("file", models.FileField(blank=True, storage=core.storage_backends.get_downloads_storage, upload_to="digital_assets/")),
                ("filename", models.CharField(max_length=255)),
                ("original_name", models.CharField(blank=True, max_length=255)),
                ("mime_type", models.CharField(blank=True, max_length=120)),
                ("size", models.PositiveBigIntegerField(blank=True, help_text="Bytes", null=True)),
                ("storage_provider", models.CharField(choices=[("s3", "Amazon S3"), ("local", "Local filesystem")], default="local", max_length=10)),
                ("storage_path", models.CharField(blank=True, max_length=500)),
                ("download_limit", models.PositiveIntegerField(default=0, help_text="0 = unlimited")),
                ("expiry_hours", models.PositiveIntegerField(default=0, help_text="0 = never expires")),
                ("asset_type", models.CharField(choices=[("file", "File"), ("license_key", "License key"), ("both", "File + license key")], default="file", max_length=16)),
                ("version", models.CharField(default="1.0", max_length=32)),
                ("is_active", models.BooleanField(default=True)),
                ("description", models.CharField(blank=True, max_length=500)),
                ("sort_order", models.IntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("product", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="digital_assets", to="products.product")),
                ("vendor", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="digital_assets", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["sort_order", "id"],
                "indexes": [
                    models.Index(fields=["product", "sort_order"], name="download_dig_product_2b7e41_idx"),
                    models.Index(fields=["vendor", "-created_at"], name="download_dig_vendor_9c04d3_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="LicenseKey",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("key", models.CharField(max_length=255)),
                ("is_used", models.BooleanField(default=False)),
                ("used_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("asset", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="license_keys", to="downloads.digitalasset")),
                ("order", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="license_keys", to="orders.order")),
                ("used_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="license_keys", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["id"],
                "indexes": [
                    models.Index(fields=["asset", "is_used"], name="download_lic_asset_i_5f1c88_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="DownloadLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("download_count", models.PositiveIntegerField(default=0)),
                ("download_limit", models.PositiveIntegerField(default=0, help_text="Copied from the asset; 0 = unlimited")),
                ("first_download_at", models.DateTimeField(blank=True, null=True)),
                ("last_download_at", models.DateTimeField(blank=True, null=True)),
                ("access_token", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("token_expires_at", models.DateTimeField(blank=True, null=True)),
                ("download_history", models.JSONField(blank=True, default=list)),
                ("assigned_license_key", models.CharField(blank=True, default="", max_length=255)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("asset", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="download_logs", to="downloads.digitalasset")),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="download_logs", to="orders.order")),
                ("product", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="download_logs", to="products.product")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="download_logs", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "-created_at"], name="download_dow_user_id_7d3a05_idx"),
                    models.Index(fields=["access_token", "is_active"], name="download_dow_access__e48b12_idx"),
                ],
            },
        ),
        migrations.AddConstraint(
            model_name="downloadlog",
            constraint=models.UniqueConstraint(fields=("order", "asset"), name="uniq_download_order_asset"),
        ),
    ]
