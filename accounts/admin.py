from __future__ import annotations

from django.contrib import admin

from .models import Profile


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "store_name", "is_vendor", "is_admin", "created_at")
    list_filter = ("is_vendor", "is_admin")
    search_fields = ("user__username", "user__email", "store_name")
