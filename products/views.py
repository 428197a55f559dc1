# products/views.py
from __future__ import annotations

from django.core.exceptions import PermissionDenied
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_http_methods

from accounts.decorators import vendor_required
from accounts.permissions import owns_product
from core.api import api_view, json_error, json_success, parse_json_body, query_int
from core.throttle import ThrottleRule, throttle

from . import services
from .models import Product, ProductVariant

PRODUCT_WRITE_RULE = ThrottleRule(key_prefix="product-write", limit=120, window_seconds=60)


def _owned_product(request, product_id: int) -> Product:
    product = get_object_or_404(Product, pk=product_id)
    if not owns_product(request.user, product):
        raise PermissionDenied("Not authorized to modify this product")
    return product


def _visible_product(request, product_id: int) -> Product:
    product = get_object_or_404(Product, pk=product_id)
    if not product.is_active and not owns_product(request.user, product):
        raise Product.DoesNotExist("Product not found")
    return product


# ------------------------------------------------------------
# Products
# ------------------------------------------------------------
@require_GET
@api_view
def _product_list(request):
    qs = services.public_products()
    category_id = request.GET.get("category")
    if category_id:
        qs = qs.filter(category_id=category_id)
    kind = request.GET.get("kind")
    if kind:
        qs = qs.filter(kind=kind)

    page = query_int(request.GET.get("page"), 1)
    limit = query_int(request.GET.get("limit"), 24, maximum=100)
    total = qs.count()
    offset = (page - 1) * limit
    return json_success(
        [p.as_dict() for p in qs[offset:offset + limit]],
        pagination={"page": page, "limit": limit, "total": total, "pages": (total + limit - 1) // limit},
    )


@vendor_required
@throttle(PRODUCT_WRITE_RULE)
@api_view
def _product_create(request):
    product = services.create_product(request.user, parse_json_body(request))
    return json_success(product.as_dict(), message="Product created", status=201)


@require_http_methods(["GET", "POST"])
def product_collection(request):
    if request.method == "POST":
        return _product_create(request)
    return _product_list(request)


@require_GET
@api_view
def _product_read(request, product_id: int):
    return json_success(_visible_product(request, product_id).as_dict())


@vendor_required
@throttle(PRODUCT_WRITE_RULE)
@api_view
def _product_update(request, product_id: int):
    product = services.update_product(_owned_product(request, product_id), parse_json_body(request))
    return json_success(product.as_dict(), message="Product updated")


@require_http_methods(["GET", "PUT"])
def product_detail(request, product_id: int):
    if request.method == "PUT":
        return _product_update(request, product_id)
    return _product_read(request, product_id)


# ------------------------------------------------------------
# Variants
# ------------------------------------------------------------
@api_view
def _variant_list(request, product_id: int):
    product = _visible_product(request, product_id)
    return json_success([v.as_dict() for v in services.active_variants(product)])


@vendor_required
@throttle(PRODUCT_WRITE_RULE)
@api_view
def _variant_generate(request, product_id: int):
    product = _owned_product(request, product_id)
    body = parse_json_body(request)
    variants = services.generate_variants(product, body.get("options"), body.get("base_price"))
    return json_success(
        {"variants": [v.as_dict() for v in variants], "count": len(variants)},
        message=f"{len(variants)} variant(s) generated",
        status=201,
    )


@vendor_required
@throttle(PRODUCT_WRITE_RULE)
@api_view
def _variant_delete_all(request, product_id: int):
    deleted = services.delete_all_variants(_owned_product(request, product_id))
    return json_success(message=f"{deleted} variant(s) deleted")


@require_http_methods(["GET", "POST", "DELETE"])
def variant_collection(request, product_id: int):
    if request.method == "POST":
        return _variant_generate(request, product_id)
    if request.method == "DELETE":
        return _variant_delete_all(request, product_id)
    return _variant_list(request, product_id)


@require_GET
@api_view
def variant_inventory(request, product_id: int):
    product = _visible_product(request, product_id)
    return json_success({"total_inventory": services.total_inventory(product)})


@require_GET
@api_view
def variant_find(request, product_id: int):
    product = _visible_product(request, product_id)
    variant = services.find_variant_by_options(
        product,
        request.GET.get("option1"),
        request.GET.get("option2"),
        request.GET.get("option3"),
    )
    if variant is None:
        return json_error("Variant not found for specified options", status=404)
    return json_success(variant.as_dict())


@require_http_methods(["PUT"])
@vendor_required
@throttle(PRODUCT_WRITE_RULE)
@api_view
def variant_bulk_update(request, product_id: int):
    product = _owned_product(request, product_id)
    body = parse_json_body(request)
    changed = services.bulk_update_variants(
        product,
        field=body.get("field"),
        action=body.get("action"),
        value=body.get("value"),
        variant_ids=body.get("variant_ids"),
    )
    return json_success(
        [v.as_dict() for v in services.active_variants(product)],
        message=f"{changed} variant(s) updated",
    )


@require_GET
@api_view
def _variant_read(request, product_id: int, variant_id: int):
    product = _visible_product(request, product_id)
    variant = get_object_or_404(ProductVariant, pk=variant_id, product=product)
    return json_success(variant.as_dict())


@vendor_required
@throttle(PRODUCT_WRITE_RULE)
@api_view
def _variant_write(request, product_id: int, variant_id: int):
    product = _owned_product(request, product_id)
    if request.method == "DELETE":
        services.delete_variant(product, variant_id)
        return json_success(message="Variant deleted successfully")

    variant = get_object_or_404(ProductVariant, pk=variant_id, product=product)
    variant = services.update_variant(variant, parse_json_body(request))
    return json_success(variant.as_dict(), message="Variant updated successfully")


@require_http_methods(["GET", "PUT", "DELETE"])
def variant_detail(request, product_id: int, variant_id: int):
    if request.method == "GET":
        return _variant_read(request, product_id, variant_id)
    return _variant_write(request, product_id, variant_id)
