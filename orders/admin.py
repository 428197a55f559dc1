# orders/admin.py

from __future__ import annotations

from django.contrib import admin

from .models import Order, OrderEvent, OrderItem


def cents_to_money(cents: int | None, currency: str = "usd") -> str:
    amount = int(cents or 0) / 100.0
    return f"{(currency or 'usd').upper()} {amount:,.2f}"


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ("product", "variant", "vendor", "title", "quantity", "unit_price_cents", "is_digital")
    readonly_fields = fields


class OrderEventInline(admin.TabularInline):
    model = OrderEvent
    extra = 0
    fields = ("type", "message", "created_at")
    readonly_fields = fields


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "customer", "status", "total_display", "paid_at", "created_at")
    list_filter = ("status",)
    search_fields = ("order_number", "customer__username", "customer__email")
    readonly_fields = ("order_number", "subtotal_cents", "total_cents", "paid_at", "created_at", "updated_at")
    inlines = [OrderItemInline, OrderEventInline]

    @admin.display(description="Total")
    def total_display(self, obj: Order) -> str:
        return cents_to_money(obj.total_cents, obj.currency)
