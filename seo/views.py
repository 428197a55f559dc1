# seo/views.py
from __future__ import annotations

from django.core.exceptions import ValidationError
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from accounts.decorators import admin_required
from core.api import api_view, json_success, parse_json_body, query_bool, query_int
from core.throttle import ThrottleRule, throttle

from . import services
from .models import UrlRedirect

REDIRECT_WRITE_RULE = ThrottleRule(key_prefix="redirect-write", limit=120, window_seconds=60)


@require_http_methods(["GET", "POST"])
@admin_required
@throttle(REDIRECT_WRITE_RULE)
@api_view
def redirect_collection(request):
    if request.method == "POST":
        redirect = services.create_redirect(parse_json_body(request), created_by=request.user)
        return json_success(redirect.as_dict(), message="Redirect created", status=201)

    qs = services.search_redirects(
        q=(request.GET.get("search") or "").strip(),
        is_active=query_bool(request.GET.get("is_active")),
    )
    page = query_int(request.GET.get("page"), 1)
    limit = query_int(request.GET.get("limit"), 50, maximum=200)
    total = qs.count()
    offset = (page - 1) * limit
    return json_success(
        [r.as_dict() for r in qs[offset:offset + limit]],
        pagination={"page": page, "limit": limit, "total": total, "pages": (total + limit - 1) // limit},
    )


@require_GET
@admin_required
@api_view
def redirect_stats(request):
    return json_success(services.get_stats())


@require_POST
@admin_required
@throttle(REDIRECT_WRITE_RULE)
@api_view
def redirect_fix_chains(request):
    fixed = services.fix_chains()
    return json_success({"fixed": fixed}, message=f"Fixed {fixed} redirect chain(s)")


@require_POST
@admin_required
@throttle(REDIRECT_WRITE_RULE)
@api_view
def redirect_import(request):
    body = parse_json_body(request)
    items = body.get("redirects")
    if not isinstance(items, list) or not items:
        raise ValidationError("redirects array is required")
    result = services.bulk_create(items, created_by=request.user)
    return json_success(result, message=f"Imported {result['created']} redirect(s)", status=201)


@require_http_methods(["GET", "PUT", "DELETE"])
@admin_required
@throttle(REDIRECT_WRITE_RULE)
@api_view
def redirect_detail(request, redirect_id: int):
    redirect = get_object_or_404(UrlRedirect, pk=redirect_id)

    if request.method == "PUT":
        services.update_redirect(redirect, parse_json_body(request))
        return json_success(redirect.as_dict(), message="Redirect updated")

    if request.method == "DELETE":
        redirect.delete()
        return json_success(message="Redirect deleted")

    return json_success(redirect.as_dict(analytics=True))
