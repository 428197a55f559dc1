# orders/services.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from django.core.exceptions import ValidationError
from django.db import transaction

from core.utils import round_money
from downloads.services import revoke_for_order
from products.models import Product, ProductVariant

from .models import Order, OrderEvent, OrderItem

logger = logging.getLogger(__name__)

REVOKING_STATUSES = (Order.Status.CANCELLED, Order.Status.REFUNDED)


@dataclass(frozen=True)
class OrderLine:
    product: Product
    quantity: int = 1
    variant: Optional[ProductVariant] = None


def money_to_cents(amount) -> int:
    return int(round_money(Decimal(str(amount or "0"))) * 100)


@transaction.atomic
def create_order(
    *,
    customer,
    lines: Iterable[OrderLine],
    currency: str = "usd",
    tax_cents: int = 0,
    shipping_cents: int = 0,
) -> Order:
    """
    Create an Order + OrderItems, snapshotting the vendor and unit price
    of every line at purchase time.
    """
    order = Order.objects.create(
        customer=customer,
        currency=(currency or "usd").lower(),
        status=Order.Status.PENDING,
        tax_cents=max(0, int(tax_cents)),
        shipping_cents=max(0, int(shipping_cents)),
    )

    items: list[OrderItem] = []
    for line in lines:
        product = line.product
        if line.variant is not None and line.variant.product_id != product.pk:
            raise ValidationError("Variant does not belong to the product.")

        qty = max(1, int(line.quantity or 1))
        is_digital = product.is_digital
        if is_digital:
            qty = 1

        price = line.variant.price if line.variant is not None else product.price
        items.append(
            OrderItem(
                order=order,
                product=product,
                variant=line.variant,
                vendor_id=product.vendor_id,
                title=product.title if line.variant is None else f"{product.title} ({line.variant.title})",
                quantity=qty,
                unit_price_cents=money_to_cents(price),
                is_digital=is_digital,
            )
        )

    if not items:
        raise ValidationError("An order needs at least one item.")

    OrderItem.objects.bulk_create(items)

    order.recompute_totals()
    order.save(update_fields=["subtotal_cents", "total_cents", "updated_at"])
    OrderEvent.objects.create(order=order, type=OrderEvent.Type.CREATED)

    logger.info("Order created %s customer=%s items=%s", order.order_number, customer.pk, len(items))
    return order


def orders_for_customer(user):
    return Order.objects.filter(customer=user).prefetch_related("items").order_by("-created_at")


def update_status(order: Order, status: str, *, note: str = "") -> Order:
    if status not in Order.Status.values:
        raise ValidationError({"status": f"Invalid status '{status}'."})
    changed = order.set_status(status, note=note)
    if changed and status in REVOKING_STATUSES:
        revoked = revoke_for_order(order)
        if revoked:
            logger.info("Revoked %s download entitlements for order %s", revoked, order.order_number)
    return order
