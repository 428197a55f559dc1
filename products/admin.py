# products/admin.py
from __future__ import annotations

from django.contrib import admin

from .models import Product, ProductVariant


class ProductVariantInline(admin.TabularInline):
    model = ProductVariant
    extra = 0
    fields = ("position", "title", "price", "quantity", "sku", "is_active")
    readonly_fields = ("title",)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "title",
        "slug",
        "kind",
        "status",
        "vendor",
        "category",
        "price",
        "quantity",
        "has_variants",
        "created_at",
    )
    list_filter = ("kind", "status", "has_variants", "category")
    search_fields = ("title", "slug", "sku", "vendor__username", "description")
    readonly_fields = ("has_variants", "options", "created_at", "updated_at")
    inlines = [ProductVariantInline]


@admin.register(ProductVariant)
class ProductVariantAdmin(admin.ModelAdmin):
    list_display = ("id", "product", "title", "price", "quantity", "track_inventory", "is_active", "position")
    list_filter = ("is_active", "track_inventory")
    search_fields = ("title", "sku", "barcode", "product__title")
    readonly_fields = ("title", "created_at", "updated_at")
