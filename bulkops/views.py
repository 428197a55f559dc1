# bulkops/views.py
from __future__ import annotations

from django.conf import settings
from django.http import Http404
from django.views.decorators.http import require_http_methods

from accounts.decorators import vendor_required
from core.api import api_view, json_success, parse_json_body, query_int
from core.throttle import ThrottleRule, throttle
from core.utils import get_setting_int

from . import services
from .models import BulkOperation

BULK_CREATE_RULE = ThrottleRule(key_prefix="bulk-create", limit=20, window_seconds=60)


@require_http_methods(["GET", "POST"])
@vendor_required
@throttle(BULK_CREATE_RULE)
@api_view
def operation_collection(request):
    if request.method == "POST":
        body = parse_json_body(request)
        op = services.create_operation(
            vendor=request.user,
            op_type=body.get("type"),
            product_ids=body.get("product_ids"),
            operation_data=body.get("operation_data"),
            requested_by=request.user,
        )
        if getattr(settings, "MARKET_BULK_PROCESS_INLINE", True):
            services.process_operation(op)
            message = "Bulk operation created and processing"
        else:
            message = "Bulk operation queued"
        return json_success(op.summary(), message=message, status=201)

    limit = query_int(request.GET.get("limit"), 20, maximum=100)
    ops = services.vendor_operations(request.user, limit=limit, status=request.GET.get("status") or None)
    return json_success([op.summary() for op in ops])


@require_http_methods(["GET", "DELETE"])
@vendor_required
@api_view
def operation_detail(request, operation_id: int):
    op = BulkOperation.objects.filter(pk=operation_id, vendor=request.user).first()
    if op is None:
        raise Http404("Bulk operation not found")

    if request.method == "DELETE":
        op.cancel()
        return json_success(op.summary(), message="Bulk operation cancelled")

    detail_errors = get_setting_int("MARKET_BULK_DETAIL_ERRORS", 100)
    return json_success({**op.summary(), "errors": (op.errors or [])[:detail_errors]})
