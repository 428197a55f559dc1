# products/services.py

from __future__ import annotations

import logging
from decimal import Decimal
from functools import reduce
from typing import Any, Iterable, Optional, Sequence

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Sum

from core.utils import round_money, to_decimal

from .models import Product, ProductVariant

logger = logging.getLogger(__name__)

MAX_OPTION_TYPES = 3

PRICE_ACTIONS = ("set", "increase", "decrease", "percent_increase", "percent_decrease")
QUANTITY_ACTIONS = ("set", "adjust")

VARIANT_UPDATE_FIELDS = (
    "price",
    "compare_at_price",
    "sku",
    "barcode",
    "quantity",
    "track_inventory",
    "weight",
    "weight_unit",
    "is_active",
    "position",
)


# ============================================================
# Arithmetic
# ============================================================
def apply_price_change(current, change: str, value) -> Decimal:
    """
    set / increase / decrease / percent_increase / percent_decrease.
    Result is rounded to cents and never negative.
    """
    cur = to_decimal(current, field="price")
    val = to_decimal(value, field="value")

    if change == "set":
        new = val
    elif change == "increase":
        new = cur + val
    elif change == "decrease":
        new = cur - val
    elif change == "percent_increase":
        new = cur * (Decimal("1") + val / Decimal("100"))
    elif change == "percent_decrease":
        new = cur * (Decimal("1") - val / Decimal("100"))
    else:
        raise ValidationError(f"Unknown price change '{change}'.")

    return max(Decimal("0.00"), round_money(new))


def apply_quantity_change(current: int, change: str, value) -> int:
    try:
        val = int(value)
    except (TypeError, ValueError):
        raise ValidationError({"value": "Must be a whole number."})

    if change == "set":
        new = val
    elif change == "adjust":
        new = int(current or 0) + val
    else:
        raise ValidationError(f"Unknown inventory change '{change}'.")
    return max(0, new)


# ============================================================
# Variant generation
# ============================================================
def cartesian(*lists: Sequence[Any]) -> list[tuple]:
    """cartesian([a, b], [1, 2]) -> [(a, 1), (a, 2), (b, 1), (b, 2)]; no lists -> [()]."""
    return reduce(lambda acc, values: [prev + (v,) for prev in acc for v in values], lists, [()])


def _clean_options(options: Any) -> list[dict]:
    if options in (None, ""):
        return []
    if not isinstance(options, list):
        raise ValidationError("Options must be a list of {name, values}.")
    if len(options) > MAX_OPTION_TYPES:
        raise ValidationError("Maximum 3 option types allowed")

    cleaned: list[dict] = []
    for opt in options:
        if not isinstance(opt, dict):
            raise ValidationError("Options must be a list of {name, values}.")
        name = str(opt.get("name") or "").strip()
        values = [str(v).strip() for v in (opt.get("values") or []) if str(v).strip()]
        if not name or not values:
            raise ValidationError("Each option needs a name and at least one value.")
        cleaned.append({"name": name, "values": values})
    return cleaned


@transaction.atomic
def generate_variants(product: Product, options: Any, base_price=None) -> list[ProductVariant]:
    """
    Replace every variant of `product` with one per option combination.

    No options -> a single "Default" variant. Product.options / has_variants follow.
    """
    cleaned = _clean_options(options)
    price = round_money(to_decimal(base_price if base_price not in (None, "") else product.price, field="base_price"))
    if price < 0:
        raise ValidationError({"base_price": "Price cannot be negative"})

    combos = cartesian(*[opt["values"] for opt in cleaned]) if cleaned else [()]

    rows: list[ProductVariant] = []
    for index, combo in enumerate(combos):
        padded = list(combo) + [None] * (MAX_OPTION_TYPES - len(combo))
        rows.append(
            ProductVariant(
                product=product,
                option1=padded[0],
                option2=padded[1],
                option3=padded[2],
                title=ProductVariant.build_title(*padded),
                price=price,
                position=index,
            )
        )

    ProductVariant.objects.filter(product=product).delete()
    ProductVariant.objects.bulk_create(rows)

    product.options = cleaned
    product.has_variants = len(rows) > 1
    product.save(update_fields=["options", "has_variants", "updated_at"])

    logger.info("Generated %s variant(s) for product=%s", len(rows), product.pk)
    return list(ProductVariant.objects.filter(product=product).order_by("position", "id"))


# ============================================================
# Variant queries / edits
# ============================================================
def active_variants(product: Product):
    return ProductVariant.objects.filter(product=product, is_active=True).order_by("position", "id")


def find_variant_by_options(
    product: Product,
    option1: Optional[str] = None,
    option2: Optional[str] = None,
    option3: Optional[str] = None,
) -> Optional[ProductVariant]:
    qs = active_variants(product)
    if option1:
        qs = qs.filter(option1=option1)
    if option2:
        qs = qs.filter(option2=option2)
    if option3:
        qs = qs.filter(option3=option3)
    return qs.first()


def total_inventory(product: Product) -> int:
    return int(active_variants(product).aggregate(total=Sum("quantity"))["total"] or 0)


@transaction.atomic
def bulk_update_variants(
    product: Product,
    *,
    field: str,
    action: str,
    value,
    variant_ids: Optional[Iterable[int]] = None,
) -> int:
    """
    Apply one price/quantity change to the product's variants (all, or the given ids).
    Returns the number of variants changed.
    """
    if not field or not action or value is None:
        raise ValidationError("field, action, and value are required")
    if field not in ("price", "quantity"):
        raise ValidationError("field must be price or quantity")

    allowed = PRICE_ACTIONS if field == "price" else QUANTITY_ACTIONS
    if action not in allowed:
        raise ValidationError(f"action must be one of: {', '.join(allowed)}")

    qs = ProductVariant.objects.select_for_update().filter(product=product)
    ids = list(variant_ids or [])
    if ids:
        qs = qs.filter(pk__in=ids)

    changed = 0
    for variant in qs:
        if field == "price":
            variant.price = apply_price_change(variant.price, action, value)
        else:
            variant.quantity = apply_quantity_change(variant.quantity, action, value)
        variant.save(update_fields=[field, "updated_at"])
        changed += 1
    return changed


def update_variant(variant: ProductVariant, data: dict) -> ProductVariant:
    for field in VARIANT_UPDATE_FIELDS:
        if field in data:
            setattr(variant, field, data[field])

    if variant.price is not None:
        variant.price = round_money(to_decimal(variant.price, field="price"))
    variant.full_clean(exclude=["product", "title"])
    variant.save()
    return variant


@transaction.atomic
def delete_variant(product: Product, variant_id: int) -> None:
    deleted, _ = ProductVariant.objects.filter(product=product, pk=variant_id).delete()
    if not deleted:
        raise ProductVariant.DoesNotExist("Variant not found")

    if not ProductVariant.objects.filter(product=product).exists():
        product.has_variants = False
        product.options = []
        product.save(update_fields=["has_variants", "options", "updated_at"])


@transaction.atomic
def delete_all_variants(product: Product) -> int:
    deleted, _ = ProductVariant.objects.filter(product=product).delete()
    product.has_variants = False
    product.options = []
    product.save(update_fields=["has_variants", "options", "updated_at"])
    return deleted


# ============================================================
# Listing
# ============================================================
def public_products():
    return Product.objects.filter(status=Product.Status.ACTIVE).select_related("category")


PRODUCT_FIELDS = (
    "title",
    "description",
    "kind",
    "status",
    "category_id",
    "price",
    "compare_at_price",
    "currency",
    "sku",
    "quantity",
    "track_inventory",
    "tags",
)


def _apply_product_fields(product: Product, data: dict) -> None:
    for field in PRODUCT_FIELDS:
        if field in data:
            setattr(product, field, data[field])

    if "tags" in data:
        tags = data["tags"] or []
        if not isinstance(tags, list):
            raise ValidationError({"tags": "Tags must be a list of strings."})
        product.tags = list(dict.fromkeys(str(t).strip() for t in tags if str(t).strip()))

    slug = (data.get("slug") or "").strip()
    if slug:
        clash = Product.objects.filter(vendor_id=product.vendor_id, slug=slug).exclude(pk=product.pk)
        if clash.exists():
            raise ValidationError({"slug": "You already have a product with this slug."})
        product.slug = slug


def create_product(vendor, data: dict) -> Product:
    product = Product(vendor=vendor)
    _apply_product_fields(product, data)
    product.full_clean(exclude=["slug"])
    product.save()
    logger.info("Product created id=%s vendor=%s", product.pk, vendor.pk)
    return product


def update_product(product: Product, data: dict) -> Product:
    _apply_product_fields(product, data)
    product.full_clean(exclude=["slug", "vendor"])
    product.save()
    return product
