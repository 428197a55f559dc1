# downloads/services.py

from __future__ import annotations

import logging
import mimetypes
import re
from typing import Any, Optional

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import IntegrityError, transaction
from django.http import FileResponse, Http404, HttpResponseRedirect
from django.utils import timezone

from core.storage_backends import signed_url, storage_provider_name
from core.utils import get_setting_int
from orders.models import Order, OrderEvent
from products.models import Product

from .models import DigitalAsset, DownloadLog, LicenseKey

logger = logging.getLogger(__name__)

KEY_SPLIT_RE = re.compile(r"[\n,]")
CLAIM_ATTEMPTS = 5

UPDATABLE_FIELDS = (
    "download_limit",
    "expiry_hours",
    "description",
    "version",
    "is_active",
    "sort_order",
    "asset_type",
)


# ============================================================
# Vendor: assets
# ============================================================
def _non_negative_int(raw: Any, field: str) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError({field: "Must be a whole number."})
    if value < 0:
        raise ValidationError({field: "Must be zero or greater."})
    return value


def _truthy(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in ("1", "true", "yes", "on")


def _apply_asset_fields(asset: DigitalAsset, data: dict) -> None:
    for field in UPDATABLE_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if field in ("download_limit", "expiry_hours"):
            value = _non_negative_int(value, field)
        elif field == "sort_order":
            try:
                value = int(value)
            except (TypeError, ValueError):
                raise ValidationError({"sort_order": "Must be a whole number."})
        elif field == "is_active":
            value = _truthy(value)
        elif field == "asset_type":
            if value not in DigitalAsset.AssetType.values:
                raise ValidationError(
                    {"asset_type": f"Must be one of: {', '.join(DigitalAsset.AssetType.values)}"}
                )
        else:
            value = str(value or "").strip()
            if field == "version" and not value:
                value = "1.0"
        setattr(asset, field, value)


def product_assets(product: Product, *, include_inactive: bool = True):
    qs = DigitalAsset.objects.filter(product=product)
    if not include_inactive:
        qs = qs.filter(is_active=True)
    return qs.order_by("sort_order", "id")


@transaction.atomic
def create_asset(product: Product, *, vendor, uploaded_file, data: dict) -> DigitalAsset:
    if not product.is_digital:
        raise ValidationError("Product must be digital type to add digital assets")
    if uploaded_file is None:
        raise ValidationError("No file uploaded")

    original_name = getattr(uploaded_file, "name", "") or "file"
    asset = DigitalAsset(
        product=product,
        vendor=vendor,
        original_name=original_name,
        filename=original_name.rsplit("/", 1)[-1],
        mime_type=(
            getattr(uploaded_file, "content_type", "")
            or mimetypes.guess_type(original_name)[0]
            or "application/octet-stream"
        ),
        size=getattr(uploaded_file, "size", None),
        storage_provider=storage_provider_name(),
    )
    _apply_asset_fields(asset, data)
    asset.file.save(original_name, uploaded_file, save=False)
    asset.storage_path = asset.file.name
    asset.save()

    logger.info("Digital asset uploaded id=%s product=%s provider=%s", asset.pk, product.pk, asset.storage_provider)
    return asset


def update_asset(asset: DigitalAsset, data: dict) -> DigitalAsset:
    _apply_asset_fields(asset, data)
    asset.save()
    return asset


def delete_asset(asset: DigitalAsset) -> None:
    asset_id = asset.pk
    if asset.file:
        asset.file.delete(save=False)
    asset.delete()
    logger.info("Digital asset deleted id=%s", asset_id)


# ============================================================
# License keys
# ============================================================
def parse_license_keys(raw: Any) -> list[str]:
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationError("keys string is required (newline or comma separated)")
    return [k.strip() for k in KEY_SPLIT_RE.split(raw) if k.strip()]


def add_license_keys(asset: DigitalAsset, raw: Any) -> int:
    keys = parse_license_keys(raw)
    LicenseKey.objects.bulk_create([LicenseKey(asset=asset, key=k) for k in keys])
    logger.info("License keys added asset=%s count=%s", asset.pk, len(keys))
    return len(keys)


def license_key_stats(asset: DigitalAsset) -> dict:
    total = asset.license_keys.count()
    used = asset.license_keys.filter(is_used=True).count()
    return {"total": total, "used": used, "available": total - used}


def assign_license_key(asset: DigitalAsset, user, order: Optional[Order]) -> Optional[LicenseKey]:
    """
    Claim the oldest unused key for this asset.

    The claim is a conditional UPDATE on is_used=False, so two buyers can
    never end up with the same key; the loser of a race tries the next one.
    """
    for _ in range(CLAIM_ATTEMPTS):
        candidate = (
            LicenseKey.objects.filter(asset=asset, is_used=False).order_by("id").values_list("pk", flat=True).first()
        )
        if candidate is None:
            return None

        claimed = LicenseKey.objects.filter(pk=candidate, is_used=False).update(
            is_used=True,
            used_by=user,
            used_at=timezone.now(),
            order=order,
        )
        if claimed:
            return LicenseKey.objects.get(pk=candidate)

    logger.warning("License key claim gave up after %s attempts asset=%s", CLAIM_ATTEMPTS, asset.pk)
    return None


# ============================================================
# Customer: delivery
# ============================================================
def _eligible_order(order_id, user) -> Order:
    order = Order.objects.filter(
        pk=order_id,
        customer=user,
        status__in=Order.DOWNLOAD_STATUSES,
    ).first()
    if order is None:
        raise Http404("Order not found or not eligible for download")
    return order


def _get_or_create_log(*, order_id, asset_id, user) -> DownloadLog:
    log = DownloadLog.objects.filter(order_id=order_id, asset_id=asset_id, user=user).first()
    if log is not None:
        return log

    order = _eligible_order(order_id, user)
    asset = DigitalAsset.objects.filter(pk=asset_id, is_active=True).first()
    if asset is None:
        raise Http404("Digital asset not found")
    if not order.items.filter(product_id=asset.product_id).exists():
        raise Http404("Digital asset not found in this order")

    try:
        with transaction.atomic():
            log = DownloadLog.for_order(order=order, user=user, asset=asset)
            log.save()
    except IntegrityError:
        # concurrent first request for the same (order, asset)
        return DownloadLog.objects.get(order=order, asset=asset)

    if asset.uses_license_keys:
        key = assign_license_key(asset, user, order)
        if key is not None:
            log.assigned_license_key = key.key
            log.save(update_fields=["assigned_license_key", "updated_at"])
        else:
            logger.warning("No license keys left asset=%s order=%s", asset.pk, order.pk)

    logger.info("Download entitlement created order=%s asset=%s user=%s", order.pk, asset.pk, user.pk)
    return log


def token_download_path(log: DownloadLog) -> str:
    return f"/api/downloads/{log.access_token}/"


def _signed_asset_url(asset: DigitalAsset) -> str:
    return signed_url(
        asset.storage_path,
        expire_seconds=get_setting_int("MARKET_SIGNED_URL_SECONDS", 3600),
    )


def _ensure_can_download(log: DownloadLog) -> None:
    allowed, reason = log.can_download()
    if not allowed:
        logger.info("Download denied log=%s reason=%s", log.pk, reason)
        raise PermissionDenied(reason)


def _record(log: DownloadLog, ip_address: str, user_agent: str) -> None:
    log.record_download(ip_address, user_agent)
    OrderEvent.objects.create(
        order_id=log.order_id,
        type=OrderEvent.Type.DOWNLOAD,
        message=f"asset={log.asset_id} count={log.download_count}",
    )


def issue_download(*, order_id, asset_id, user, ip_address: str = "", user_agent: str = "") -> dict:
    """
    Hand out a download link for one asset of one order.

    A signed S3 URL is the file itself, so handing it out counts as a
    download. A local token link is counted when it is fetched.
    """
    log = _get_or_create_log(order_id=order_id, asset_id=asset_id, user=user)

    with transaction.atomic():
        log = DownloadLog.objects.select_for_update().select_related("asset").get(pk=log.pk)
        _ensure_can_download(log)

        if log.asset.storage_provider == DigitalAsset.StorageProvider.S3:
            url = _signed_asset_url(log.asset)
            _record(log, ip_address, user_agent)
        else:
            url = token_download_path(log)

    return {
        "download_url": url,
        "filename": log.asset.original_name or log.asset.filename,
        "remaining_downloads": log.remaining_downloads,
        "license_key": log.assigned_license_key or None,
    }


def serve_token_download(token, *, ip_address: str = "", user_agent: str = ""):
    with transaction.atomic():
        log = (
            DownloadLog.objects.select_for_update()
            .select_related("asset")
            .filter(access_token=token, is_active=True)
            .first()
        )
        if log is None:
            raise Http404("Invalid or expired download link")
        _ensure_can_download(log)

        asset = log.asset
        if asset.storage_provider != DigitalAsset.StorageProvider.S3 and not asset.file:
            raise Http404("File not available for this asset")
        _record(log, ip_address, user_agent)

    if asset.storage_provider == DigitalAsset.StorageProvider.S3:
        return HttpResponseRedirect(_signed_asset_url(asset))

    file_handle = asset.file.open("rb")
    filename = asset.original_name or asset.filename
    return FileResponse(file_handle, as_attachment=True, filename=filename)


def user_downloads(user):
    return (
        DownloadLog.objects.filter(user=user, is_active=True)
        .select_related("asset", "product", "order")
        .order_by("-created_at")
    )


def refresh_download_token(log: DownloadLog) -> DownloadLog:
    """
    Rotate the access token; the entitlement's expiry and counters stay.

    Revoked, expired or used-up entitlements cannot be refreshed.
    """
    _ensure_can_download(log)
    log.refresh_token(expiry_hours=0)
    logger.info("Download token refreshed log=%s", log.pk)
    return log


def revoke_for_order(order: Order) -> int:
    return DownloadLog.objects.filter(order=order, is_active=True).update(is_active=False, updated_at=timezone.now())
