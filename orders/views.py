# orders/views.py
from __future__ import annotations

from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_http_methods

from accounts.decorators import admin_required, api_login_required
from core.api import api_view, json_success, parse_json_body, query_int

from . import services
from .models import Order


@require_GET
@api_login_required
@api_view
def my_orders(request):
    limit = query_int(request.GET.get("limit"), 20, maximum=100)
    orders = services.orders_for_customer(request.user)[:limit]
    return json_success([o.as_dict() for o in orders])


@require_GET
@api_login_required
@api_view
def order_detail(request, order_id):
    order = get_object_or_404(Order.objects.prefetch_related("items"), pk=order_id, customer=request.user)
    return json_success(order.as_dict())


@require_http_methods(["PUT"])
@admin_required
@api_view
def order_status(request, order_id):
    order = get_object_or_404(Order, pk=order_id)
    body = parse_json_body(request)
    services.update_status(order, str(body.get("status") or ""), note=str(body.get("note") or ""))
    return json_success(order.as_dict(), message="Order status updated")
