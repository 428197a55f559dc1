from __future__ import annotations

from django.contrib import admin

from .models import Attribute, Category, CategoryAttribute


class CategoryAttributeInline(admin.TabularInline):
    model = CategoryAttribute
    fk_name = "category"
    extra = 0
    autocomplete_fields = ("attribute",)
    fields = ("attribute", "is_required", "is_inherited", "inherited_from", "sort_order")
    readonly_fields = ("is_inherited", "inherited_from")


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "parent", "is_active", "sort_order", "updated_at")
    list_filter = ("is_active",)
    search_fields = ("name", "slug", "description")
    list_editable = ("is_active", "sort_order")
    autocomplete_fields = ("parent",)
    prepopulated_fields = {"slug": ("name",)}
    inlines = [CategoryAttributeInline]

    fieldsets = (
        ("Core", {"fields": ("name", "slug", "parent", "description")}),
        ("Display", {"fields": ("is_active", "sort_order")}),
        ("Timestamps", {"fields": ("created_at", "updated_at")}),
    )
    readonly_fields = ("created_at", "updated_at")


@admin.register(Attribute)
class AttributeAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "type", "is_filterable", "is_active", "sort_order")
    list_filter = ("type", "is_filterable", "is_active")
    search_fields = ("name", "slug")
    list_editable = ("is_active", "sort_order")

    fieldsets = (
        ("Core", {"fields": ("name", "slug", "type", "description")}),
        ("Values", {"fields": ("options", "validation")}),
        ("Behaviour", {"fields": ("is_filterable", "is_searchable", "is_visible_on_product", "is_required")}),
        ("Display", {"fields": ("is_active", "sort_order")}),
        ("Timestamps", {"fields": ("created_at", "updated_at")}),
    )
    readonly_fields = ("slug", "created_at", "updated_at")
