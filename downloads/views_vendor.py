# downloads/views_vendor.py
from __future__ import annotations

from django.core.exceptions import PermissionDenied
from django.http import Http404
from django.views.decorators.http import require_http_methods

from accounts.decorators import vendor_required
from accounts.permissions import owns_product
from core.api import api_view, json_success, parse_json_body
from core.throttle import ThrottleRule, throttle
from products.models import Product

from . import services
from .models import DigitalAsset

ASSET_WRITE_RULE = ThrottleRule(key_prefix="asset-write", limit=60, window_seconds=60)


def _owned_product(request, product_id: int) -> Product:
    product = Product.objects.filter(pk=product_id).first()
    if product is None:
        raise Http404("Product not found")
    if not owns_product(request.user, product):
        raise PermissionDenied("Not authorized to manage assets for this product")
    return product


def _owned_asset(request, product_id: int, asset_id: int) -> DigitalAsset:
    product = _owned_product(request, product_id)
    asset = DigitalAsset.objects.filter(pk=asset_id, product=product).first()
    if asset is None:
        raise Http404("Digital asset not found")
    return asset


def _asset_payload(asset: DigitalAsset) -> dict:
    data = asset.as_dict()
    if asset.uses_license_keys:
        data["license_keys"] = services.license_key_stats(asset)
    return data


@require_http_methods(["GET", "POST"])
@vendor_required
@throttle(ASSET_WRITE_RULE)
@api_view
def asset_collection(request, product_id: int):
    product = _owned_product(request, product_id)

    if request.method == "POST":
        asset = services.create_asset(
            product,
            vendor=request.user,
            uploaded_file=request.FILES.get("file"),
            data=request.POST.dict(),
        )
        return json_success(_asset_payload(asset), message="Digital asset uploaded", status=201)

    assets = services.product_assets(product)
    return json_success([_asset_payload(a) for a in assets])


@require_http_methods(["GET", "PUT", "DELETE"])
@vendor_required
@throttle(ASSET_WRITE_RULE)
@api_view
def asset_detail(request, product_id: int, asset_id: int):
    asset = _owned_asset(request, product_id, asset_id)

    if request.method == "PUT":
        services.update_asset(asset, parse_json_body(request))
        return json_success(_asset_payload(asset), message="Digital asset updated")

    if request.method == "DELETE":
        services.delete_asset(asset)
        return json_success(message="Digital asset deleted")

    return json_success(_asset_payload(asset))


@require_http_methods(["GET", "POST"])
@vendor_required
@throttle(ASSET_WRITE_RULE)
@api_view
def asset_license_keys(request, product_id: int, asset_id: int):
    asset = _owned_asset(request, product_id, asset_id)

    if request.method == "POST":
        body = parse_json_body(request)
        services.add_license_keys(asset, body.get("keys"))
        stats = services.license_key_stats(asset)
        return json_success(
            stats,
            message=f"License keys added. Total: {stats['total']}, Available: {stats['available']}",
            status=201,
        )

    return json_success(services.license_key_stats(asset))
