# catalog/views.py
from __future__ import annotations

from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_http_methods

from accounts.decorators import admin_required
from core.api import api_view, json_success, parse_json_body, query_bool, query_int
from core.throttle import ThrottleRule, throttle

from . import services
from .models import Attribute, Category

CATALOG_WRITE_RULE = ThrottleRule(key_prefix="catalog-write", limit=60, window_seconds=60)


@require_GET
@api_view
def category_list(request):
    qs = Category.objects.filter(is_active=True).order_by("parent_id", "sort_order", "name")
    return json_success([c.as_dict() for c in qs])


# ------------------------------------------------------------
# Attributes (admin only)
# ------------------------------------------------------------
@require_http_methods(["GET", "POST"])
@admin_required
@throttle(CATALOG_WRITE_RULE)
@api_view
def attribute_collection(request):
    if request.method == "POST":
        attribute = services.create_attribute(parse_json_body(request))
        return json_success(attribute.as_dict(), message="Attribute created", status=201)

    page = query_int(request.GET.get("page"), 1)
    limit = query_int(request.GET.get("limit"), 50, maximum=200)
    qs = services.filter_attributes(
        type=request.GET.get("type") or None,
        is_filterable=query_bool(request.GET.get("is_filterable")),
        is_active=query_bool(request.GET.get("is_active")),
    )
    total = qs.count()
    offset = (page - 1) * limit
    rows = [a.as_dict() for a in qs[offset:offset + limit]]
    return json_success(
        rows,
        pagination={
            "page": page,
            "limit": limit,
            "total": total,
            "pages": (total + limit - 1) // limit,
        },
    )


@require_GET
@api_view
def attribute_filterable(request):
    return json_success([a.as_dict() for a in services.filterable_attributes()])


@require_http_methods(["GET", "PUT", "DELETE"])
@admin_required
@throttle(CATALOG_WRITE_RULE)
@api_view
def attribute_detail(request, attribute_id: int):
    attribute = get_object_or_404(Attribute, pk=attribute_id)

    if request.method == "PUT":
        attribute = services.update_attribute(attribute, parse_json_body(request))
        return json_success(attribute.as_dict(), message="Attribute updated")

    if request.method == "DELETE":
        services.delete_attribute(attribute)
        return json_success(message="Attribute deleted")

    return json_success(attribute.as_dict())


@require_http_methods(["POST"])
@admin_required
@throttle(CATALOG_WRITE_RULE)
@api_view
def attribute_option_add(request, attribute_id: int):
    attribute = get_object_or_404(Attribute, pk=attribute_id)
    attribute = services.add_option(attribute, parse_json_body(request))
    return json_success(attribute.as_dict(), message="Option added", status=201)


@require_http_methods(["PUT", "DELETE"])
@admin_required
@throttle(CATALOG_WRITE_RULE)
@api_view
def attribute_option_detail(request, attribute_id: int, option_id: str):
    attribute = get_object_or_404(Attribute, pk=attribute_id)
    if request.method == "DELETE":
        attribute = services.delete_option(attribute, option_id)
        return json_success(attribute.as_dict(), message="Option deleted")
    attribute = services.update_option(attribute, option_id, parse_json_body(request))
    return json_success(attribute.as_dict(), message="Option updated")


# ------------------------------------------------------------
# Category attributes (public read, admin write)
# ------------------------------------------------------------
@require_GET
@api_view
def _category_attributes_read(request, category_id: int):
    category = get_object_or_404(Category, pk=category_id)
    return json_success(services.attributes_for_category(category))


@admin_required
@throttle(CATALOG_WRITE_RULE)
@api_view
def _category_attributes_assign(request, category_id: int):
    category = get_object_or_404(Category, pk=category_id)
    body = parse_json_body(request)
    attribute = get_object_or_404(Attribute, pk=body.get("attribute_id"))
    link = services.assign_attribute(
        category,
        attribute,
        is_required=bool(body.get("is_required", False)),
        sort_order=body.get("sort_order"),
        propagate=bool(body.get("propagate_to_children", False)),
    )
    return json_success(link.as_dict(), message="Attribute assigned to category", status=201)


@require_http_methods(["GET", "POST"])
def category_attributes(request, category_id: int):
    if request.method == "POST":
        return _category_attributes_assign(request, category_id)
    return _category_attributes_read(request, category_id)


@require_http_methods(["PUT", "DELETE"])
@admin_required
@throttle(CATALOG_WRITE_RULE)
@api_view
def category_attribute_detail(request, category_id: int, attribute_id: int):
    category = get_object_or_404(Category, pk=category_id)
    attribute = get_object_or_404(Attribute, pk=attribute_id)

    if request.method == "DELETE":
        services.remove_attribute(category, attribute)
        return json_success(message="Attribute removed from category")

    link = services.update_category_attribute(category, attribute, parse_json_body(request))
    return json_success(link.as_dict(), message="Category attribute updated")


@require_http_methods(["PUT"])
@admin_required
@throttle(CATALOG_WRITE_RULE)
@api_view
def category_attributes_reorder(request, category_id: int):
    category = get_object_or_404(Category, pk=category_id)
    services.reorder_category_attributes(category, parse_json_body(request).get("order"))
    return json_success(message="Attributes reordered")
