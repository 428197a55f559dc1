# downloads/models.py
from __future__ import annotations

import uuid
from datetime import timedelta
from pathlib import Path
from typing import Optional, Union

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.storage_backends import get_downloads_storage
from core.utils import get_setting_int


class DigitalAsset(models.Model):
    """
    Downloadable file and/or license-key pool attached to a digital product.
    Files go to the private downloads bucket when USE_S3=True.
    """

    class AssetType(models.TextChoices):
        FILE = "file", "File"
        LICENSE_KEY = "license_key", "License key"
        BOTH = "both", "File + license key"

    class StorageProvider(models.TextChoices):
        S3 = "s3", "Amazon S3"
        LOCAL = "local", "Local filesystem"

    product = models.ForeignKey("products.Product", on_delete=models.CASCADE, related_name="digital_assets")
    vendor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="digital_assets",
    )

    file = models.FileField(upload_to="digital_assets/", storage=get_downloads_storage, blank=True)

    filename = models.CharField(max_length=255)
    original_name = models.CharField(max_length=255, blank=True)
    mime_type = models.CharField(max_length=120, blank=True)
    size = models.PositiveBigIntegerField(null=True, blank=True, help_text="Bytes")

    storage_provider = models.CharField(
        max_length=10,
        choices=StorageProvider.choices,
        default=StorageProvider.LOCAL,
    )
    storage_path = models.CharField(max_length=500, blank=True)

    download_limit = models.PositiveIntegerField(default=0, help_text="0 = unlimited")
    expiry_hours = models.PositiveIntegerField(default=0, help_text="0 = never expires")

    asset_type = models.CharField(max_length=16, choices=AssetType.choices, default=AssetType.FILE)
    version = models.CharField(max_length=32, default="1.0")

    is_active = models.BooleanField(default=True)
    description = models.CharField(max_length=500, blank=True)
    sort_order = models.IntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["sort_order", "id"]
        indexes = [
            models.Index(fields=["product", "sort_order"], name="download_dig_product_2b7e41_idx"),
            models.Index(fields=["vendor", "-created_at"], name="download_dig_vendor_9c04d3_idx"),
        ]

    def __str__(self) -> str:
        return f"Asset<{self.product_id}>#{self.pk} {self.filename}"

    @property
    def uses_license_keys(self) -> bool:
        return self.asset_type in (self.AssetType.LICENSE_KEY, self.AssetType.BOTH)

    @property
    def file_extension(self) -> Optional[str]:
        ext = Path(self.filename or "").suffix.lower().lstrip(".")
        return ext or None

    @property
    def formatted_size(self) -> str:
        if not self.size:
            return "Unknown"
        units = ["B", "KB", "MB", "GB"]
        size = float(self.size)
        idx = 0
        while size >= 1024 and idx < len(units) - 1:
            size /= 1024
            idx += 1
        return f"{size:.2f} {units[idx]}"

    def has_available_keys(self) -> bool:
        if self.asset_type == self.AssetType.FILE:
            return True
        return self.license_keys.filter(is_used=False).exists()

    def as_dict(self) -> dict:
        return {
            "id": self.pk,
            "product_id": self.product_id,
            "filename": self.filename,
            "original_name": self.original_name,
            "mime_type": self.mime_type,
            "size": self.size,
            "formatted_size": self.formatted_size,
            "file_extension": self.file_extension,
            "storage_provider": self.storage_provider,
            "download_limit": self.download_limit,
            "expiry_hours": self.expiry_hours,
            "asset_type": self.asset_type,
            "version": self.version,
            "is_active": self.is_active,
            "description": self.description,
            "sort_order": self.sort_order,
            "created_at": self.created_at,
        }


class LicenseKey(models.Model):
    asset = models.ForeignKey(DigitalAsset, on_delete=models.CASCADE, related_name="license_keys")
    key = models.CharField(max_length=255)

    is_used = models.BooleanField(default=False)
    used_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="license_keys",
    )
    used_at = models.DateTimeField(null=True, blank=True)
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="license_keys",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]
        indexes = [
            models.Index(fields=["asset", "is_used"], name="download_lic_asset_i_5f1c88_idx"),
        ]

    def __str__(self) -> str:
        state = "used" if self.is_used else "free"
        return f"Key<{self.asset_id}>#{self.pk} ({state})"


def _token_expiry(hours: int):
    if hours and hours > 0:
        return timezone.now() + timedelta(hours=hours)
    return None


class DownloadLog(models.Model):
    """One row per (order, asset): delivery entitlement, counters and history."""

    asset = models.ForeignKey(DigitalAsset, on_delete=models.CASCADE, related_name="download_logs")
    order = models.ForeignKey("orders.Order", on_delete=models.CASCADE, related_name="download_logs")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="download_logs",
    )
    product = models.ForeignKey("products.Product", on_delete=models.CASCADE, related_name="download_logs")

    download_count = models.PositiveIntegerField(default=0)
    download_limit = models.PositiveIntegerField(default=0, help_text="Copied from the asset; 0 = unlimited")
    first_download_at = models.DateTimeField(null=True, blank=True)
    last_download_at = models.DateTimeField(null=True, blank=True)

    access_token = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    token_expires_at = models.DateTimeField(null=True, blank=True)

    # [{"downloaded_at", "ip_address", "user_agent"}], newest last
    download_history = models.JSONField(default=list, blank=True)

    assigned_license_key = models.CharField(max_length=255, blank=True, default="")
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["order", "asset"], name="uniq_download_order_asset"),
        ]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="download_dow_user_id_7d3a05_idx"),
            models.Index(fields=["access_token", "is_active"], name="download_dow_access__e48b12_idx"),
        ]

    def __str__(self) -> str:
        return f"DownloadLog<{self.order_id}:{self.asset_id}> {self.download_count}/{self.download_limit or '∞'}"

    @classmethod
    def for_order(cls, *, order, user, asset: DigitalAsset) -> "DownloadLog":
        return cls(
            asset=asset,
            order=order,
            user=user,
            product_id=asset.product_id,
            download_limit=asset.download_limit,
            token_expires_at=_token_expiry(asset.expiry_hours),
        )

    def is_token_expired(self) -> bool:
        return bool(self.token_expires_at and timezone.now() > self.token_expires_at)

    def can_download(self) -> tuple[bool, Optional[str]]:
        if not self.is_active:
            return False, "Download access has been revoked"
        if self.is_token_expired():
            return False, "Download link has expired"
        if self.download_limit > 0 and self.download_count >= self.download_limit:
            return False, "Download limit reached"
        return True, None

    @property
    def remaining_downloads(self) -> Union[int, str]:
        if self.download_limit == 0:
            return "Unlimited"
        return max(0, self.download_limit - self.download_count)

    def record_download(self, ip_address: str = "", user_agent: str = "") -> None:
        now = timezone.now()
        if not self.first_download_at:
            self.first_download_at = now
        self.last_download_at = now
        self.download_count += 1

        keep = get_setting_int("MARKET_DOWNLOAD_HISTORY_LIMIT", 100)
        history = list(self.download_history or [])
        history.append(
            {
                "downloaded_at": now.isoformat(),
                "ip_address": ip_address or "",
                "user_agent": (user_agent or "")[:255],
            }
        )
        self.download_history = history[-keep:]
        self.save(
            update_fields=[
                "first_download_at",
                "last_download_at",
                "download_count",
                "download_history",
                "updated_at",
            ]
        )

    def refresh_token(self, expiry_hours: int = 24) -> None:
        self.access_token = uuid.uuid4()
        if expiry_hours > 0:
            self.token_expires_at = _token_expiry(expiry_hours)
        self.save(update_fields=["access_token", "token_expires_at", "updated_at"])

    def as_dict(self) -> dict:
        return {
            "id": self.pk,
            "order_id": str(self.order_id),
            "asset_id": self.asset_id,
            "product_id": self.product_id,
            "download_count": self.download_count,
            "download_limit": self.download_limit,
            "remaining_downloads": self.remaining_downloads,
            "first_download_at": self.first_download_at,
            "last_download_at": self.last_download_at,
            "token_expires_at": self.token_expires_at,
            "license_key": self.assigned_license_key or None,
            "is_active": self.is_active,
        }
