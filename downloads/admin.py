from __future__ import annotations

from django.contrib import admin

from .models import DigitalAsset, DownloadLog, LicenseKey


class LicenseKeyInline(admin.TabularInline):
    model = LicenseKey
    extra = 0
    fields = ("key", "is_used", "used_by", "used_at", "order")
    readonly_fields = ("used_by", "used_at", "order")


@admin.register(DigitalAsset)
class DigitalAssetAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "product",
        "filename",
        "asset_type",
        "storage_provider",
        "download_limit",
        "expiry_hours",
        "is_active",
        "created_at",
    )
    list_filter = ("asset_type", "storage_provider", "is_active")
    search_fields = ("filename", "original_name", "product__title")
    readonly_fields = ("storage_provider", "storage_path", "size", "mime_type", "created_at", "updated_at")
    inlines = [LicenseKeyInline]


@admin.register(DownloadLog)
class DownloadLogAdmin(admin.ModelAdmin):
    list_display = ("id", "order", "asset", "user", "download_count", "download_limit", "is_active", "last_download_at")
    list_filter = ("is_active",)
    search_fields = ("order__order_number", "user__username", "assigned_license_key")
    readonly_fields = (
        "access_token",
        "download_history",
        "first_download_at",
        "last_download_at",
        "created_at",
        "updated_at",
    )
    actions = ["revoke_access"]

    @admin.action(description="Revoke download access")
    def revoke_access(self, request, queryset):
        updated = queryset.update(is_active=False)
        self.message_user(request, f"Revoked {updated} download(s).")
