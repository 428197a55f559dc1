# bulkops/services.py

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction

from catalog.models import Category
from core.utils import to_decimal
from products.models import Product
from products.services import (
    PRICE_ACTIONS,
    QUANTITY_ACTIONS,
    apply_price_change,
    apply_quantity_change,
    bulk_update_variants,
)

from .models import BulkOperation

logger = logging.getLogger(__name__)

# csv_import / csv_export exist on the model but are not accepted here.
MUTATION_TYPES = (
    BulkOperation.Type.PRICE_UPDATE,
    BulkOperation.Type.INVENTORY_UPDATE,
    BulkOperation.Type.STATUS_UPDATE,
    BulkOperation.Type.DELETE,
    BulkOperation.Type.CATEGORY_UPDATE,
    BulkOperation.Type.TAG_UPDATE,
)


class ItemError(Exception):
    """A single product could not be processed; the operation carries on."""


# ============================================================
# Validation / creation
# ============================================================
def _clean_product_ids(raw: Any) -> list[int]:
    if not isinstance(raw, list) or not raw:
        raise ValidationError("product_ids array is required")
    ids: list[int] = []
    for value in raw:
        if isinstance(value, bool):
            raise ValidationError("product_ids must contain product ids")
        try:
            ids.append(int(value))
        except (TypeError, ValueError):
            raise ValidationError("product_ids must contain product ids")
    # keep first occurrence order
    return list(dict.fromkeys(ids))


def _str_list(raw: Any, field: str) -> list[str]:
    if raw in (None, ""):
        return []
    if not isinstance(raw, list):
        raise ValidationError({field: "Must be a list of strings."})
    return [str(t).strip() for t in raw if str(t).strip()]


def clean_operation_data(op_type: str, data: Any) -> dict:
    data = data or {}
    if not isinstance(data, dict):
        raise ValidationError("operation_data must be an object")

    if op_type == BulkOperation.Type.PRICE_UPDATE:
        change = data.get("price_change")
        if change not in PRICE_ACTIONS:
            raise ValidationError({"price_change": f"Must be one of: {', '.join(PRICE_ACTIONS)}"})
        value = to_decimal(data.get("price_value"), field="price_value")
        return {"price_change": change, "price_value": str(value)}

    if op_type == BulkOperation.Type.INVENTORY_UPDATE:
        change = data.get("inventory_change")
        if change not in QUANTITY_ACTIONS:
            raise ValidationError({"inventory_change": f"Must be one of: {', '.join(QUANTITY_ACTIONS)}"})
        try:
            value = int(data.get("inventory_value"))
        except (TypeError, ValueError):
            raise ValidationError({"inventory_value": "Must be a whole number."})
        return {"inventory_change": change, "inventory_value": value}

    if op_type == BulkOperation.Type.STATUS_UPDATE:
        new_status = data.get("new_status")
        if new_status not in Product.Status.values:
            raise ValidationError({"new_status": f"Must be one of: {', '.join(Product.Status.values)}"})
        return {"new_status": new_status}

    if op_type == BulkOperation.Type.CATEGORY_UPDATE:
        try:
            category_id = int(data.get("new_category"))
        except (TypeError, ValueError):
            raise ValidationError({"new_category": "Category not found."})
        if not Category.objects.filter(pk=category_id).exists():
            raise ValidationError({"new_category": "Category not found."})
        return {"new_category": category_id}

    if op_type == BulkOperation.Type.TAG_UPDATE:
        return {
            "tags_to_add": _str_list(data.get("tags_to_add"), "tags_to_add"),
            "tags_to_remove": _str_list(data.get("tags_to_remove"), "tags_to_remove"),
        }

    return {}


def create_operation(
    *,
    vendor,
    op_type: str,
    product_ids: Any,
    operation_data: Any = None,
    requested_by=None,
) -> BulkOperation:
    if op_type not in MUTATION_TYPES:
        raise ValidationError(f"Invalid operation type. Valid types: {', '.join(MUTATION_TYPES)}")

    ids = _clean_product_ids(product_ids)
    owned = Product.objects.filter(pk__in=ids, vendor=vendor).count()
    if owned != len(ids):
        raise PermissionDenied("Some products not found or not authorized")

    op = BulkOperation.objects.create(
        vendor=vendor,
        requested_by=requested_by,
        type=op_type,
        product_ids=ids,
        product_count=len(ids),
        operation_data=clean_operation_data(op_type, operation_data),
    )
    logger.info("Bulk operation created id=%s type=%s vendor=%s products=%s", op.pk, op.type, vendor.pk, len(ids))
    return op


# ============================================================
# Per-product handlers
# ============================================================
def _update_price(product: Product, data: dict) -> None:
    change, value = data["price_change"], data["price_value"]
    product.price = apply_price_change(product.price, change, value)
    product.save(update_fields=["price", "updated_at"])
    if product.has_variants:
        bulk_update_variants(product, field="price", action=change, value=value)


def _update_inventory(product: Product, data: dict) -> None:
    change, value = data["inventory_change"], data["inventory_value"]
    product.quantity = apply_quantity_change(product.quantity, change, value)
    product.save(update_fields=["quantity", "updated_at"])
    if product.has_variants:
        bulk_update_variants(product, field="quantity", action=change, value=value)


def _update_status(product: Product, data: dict) -> None:
    product.status = data["new_status"]
    product.save(update_fields=["status", "updated_at"])


def _soft_delete(product: Product, data: dict) -> None:
    product.status = Product.Status.INACTIVE
    product.save(update_fields=["status", "updated_at"])


def _update_category(product: Product, data: dict) -> None:
    product.category_id = data["new_category"]
    product.save(update_fields=["category", "updated_at"])


def _update_tags(product: Product, data: dict) -> None:
    remove = set(data.get("tags_to_remove") or [])
    tags = [t for t in (product.tags or []) if t not in remove]
    for tag in data.get("tags_to_add") or []:
        if tag not in tags:
            tags.append(tag)
    product.tags = tags
    product.save(update_fields=["tags", "updated_at"])


HANDLERS: dict[str, Callable[[Product, dict], None]] = {
    BulkOperation.Type.PRICE_UPDATE: _update_price,
    BulkOperation.Type.INVENTORY_UPDATE: _update_inventory,
    BulkOperation.Type.STATUS_UPDATE: _update_status,
    BulkOperation.Type.DELETE: _soft_delete,
    BulkOperation.Type.CATEGORY_UPDATE: _update_category,
    BulkOperation.Type.TAG_UPDATE: _update_tags,
}


def _apply_to_product(op: BulkOperation, product_id: int) -> None:
    handler = HANDLERS.get(op.type)
    if handler is None:
        raise ItemError(f"Unsupported operation type '{op.type}'")

    with transaction.atomic():
        product = Product.objects.select_for_update().filter(pk=product_id, vendor_id=op.vendor_id).first()
        if product is None:
            raise ItemError("Product not found")
        handler(product, op.operation_data or {})


def _error_message(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        return "; ".join(str(m) for m in exc.messages)
    return str(exc) or exc.__class__.__name__


# ============================================================
# Processor
# ============================================================
def process_operation(op: BulkOperation) -> BulkOperation:
    """
    Run an operation to completion, one product at a time.

    Per-product failures are recorded and counted; progress is saved after
    each product. A cancel issued elsewhere stops the loop.
    """
    if not op.start_processing():
        logger.info("Bulk operation %s skipped, status=%s", op.pk, op.status)
        return op

    try:
        logger.info("Bulk operation %s started (%s, %s products)", op.pk, op.type, op.product_count)

        processed = succeeded = failed = 0
        for product_id in op.product_ids or []:
            if op.was_cancelled():
                logger.info("Bulk operation %s cancelled after %s products", op.pk, processed)
                op.refresh_from_db()
                return op

            sku: Optional[str] = None
            try:
                _apply_to_product(op, product_id)
                succeeded += 1
            except Exception as exc:
                failed += 1
                sku = Product.objects.filter(pk=product_id).values_list("sku", flat=True).first() or None
                message = _error_message(exc)
                logger.warning("Bulk operation %s product=%s failed: %s", op.pk, product_id, message)
                op.add_error(product_id, message, sku=sku)

            processed += 1
            op.update_progress(processed, succeeded, failed)

        op.complete()
        logger.info(
            "Bulk operation %s finished status=%s succeeded=%s failed=%s",
            op.pk,
            op.status,
            succeeded,
            failed,
        )
    except Exception as exc:
        logger.exception("Bulk operation %s failed", op.pk)
        op.fail(_error_message(exc))
    return op


# ============================================================
# Queries
# ============================================================
def vendor_operations(vendor, *, limit: int = 20, status: Optional[str] = None):
    qs = BulkOperation.objects.filter(vendor=vendor)
    if status:
        qs = qs.filter(status=status)
    return qs.order_by("-created_at")[:limit]


def pending_operations():
    return BulkOperation.objects.filter(status=BulkOperation.Status.PENDING).order_by("created_at")
