from __future__ import annotations

from django.contrib import admin

from .models import UrlRedirect


@admin.register(UrlRedirect)
class UrlRedirectAdmin(admin.ModelAdmin):
    list_display = (
        "old_url",
        "new_url",
        "redirect_type",
        "reason",
        "hit_count",
        "last_accessed_at",
        "is_active",
        "expires_at",
    )
    list_filter = ("redirect_type", "reason", "is_active", "entity_type")
    search_fields = ("old_url", "new_url", "description")
    readonly_fields = ("hit_count", "last_accessed_at", "referrers", "daily_hits", "created_at", "updated_at")
