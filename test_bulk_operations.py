from __future__ import annotations

from decimal import Decimal

import pytest
from django.core.exceptions import PermissionDenied, ValidationError
from django.core.management import call_command

from bulkops import services
from bulkops.models import BulkOperation
from catalog.models import Category
from products.models import Product, ProductVariant
from products.services import generate_variants

pytestmark = pytest.mark.django_db


def _op(vendor, op_type, products, data):
    return services.create_operation(
        vendor=vendor,
        op_type=op_type,
        product_ids=[p.pk for p in products],
        operation_data=data,
        requested_by=vendor,
    )


def test_percent_increase_of_ten_on_one_hundred_gives_one_ten(vendor, make_product):
    product = make_product(price=Decimal("100.00"))
    op = _op(vendor, "price_update", [product], {"price_change": "percent_increase", "price_value": 10})

    services.process_operation(op)

    product.refresh_from_db()
    assert product.price == Decimal("110.00")
    assert op.status == BulkOperation.Status.COMPLETED
    assert op.progress == {"processed": 1, "succeeded": 1, "failed": 0, "skipped": 0, "percentage": 100}


def test_price_update_also_moves_variants(vendor, make_product):
    product = make_product(price=Decimal("50.00"))
    generate_variants(product, [{"name": "Size", "values": ["S", "M"]}])

    op = _op(vendor, "price_update", [product], {"price_change": "increase", "price_value": "5"})
    services.process_operation(op)

    assert set(ProductVariant.objects.filter(product=product).values_list("price", flat=True)) == {Decimal("55.00")}


def test_inventory_status_category_tags(vendor, make_product):
    a = make_product(title="A", quantity=3, tags=["old", "keep"])
    b = make_product(title="B", quantity=8, tags=["keep"])
    new_cat = Category.objects.create(name="Sale")

    services.process_operation(_op(vendor, "inventory_update", [a, b], {"inventory_change": "adjust", "inventory_value": -5}))
    services.process_operation(_op(vendor, "status_update", [a], {"new_status": "draft"}))
    services.process_operation(_op(vendor, "category_update", [a, b], {"new_category": new_cat.pk}))
    services.process_operation(_op(vendor, "tag_update", [a], {"tags_to_add": ["sale"], "tags_to_remove": ["old"]}))

    a.refresh_from_db()
    b.refresh_from_db()
    assert (a.quantity, b.quantity) == (0, 3)
    assert a.status == Product.Status.DRAFT
    assert a.category_id == b.category_id == new_cat.pk
    assert a.tags == ["keep", "sale"]


def test_delete_is_soft(vendor, make_product):
    product = make_product()
    services.process_operation(_op(vendor, "delete", [product], {}))
    product.refresh_from_db()
    assert product.status == Product.Status.INACTIVE


def test_products_of_other_vendors_rejected(vendor, other_vendor, make_product):
    theirs = make_product(vendor=other_vendor)
    with pytest.raises(PermissionDenied) as exc:
        _op(vendor, "delete", [theirs], {})
    assert str(exc.value) == "Some products not found or not authorized"


@pytest.mark.parametrize(
    "op_type,data",
    [
        ("price_update", {"price_change": "double", "price_value": 1}),
        ("inventory_update", {"inventory_change": "set", "inventory_value": "lots"}),
        ("status_update", {"new_status": "archived"}),
        ("category_update", {"new_category": 999999}),
        ("csv_import", {}),
    ],
)
def test_invalid_operation_data(vendor, make_product, op_type, data):
    product = make_product()
    with pytest.raises(ValidationError):
        _op(vendor, op_type, [product], data)


def test_product_ids_required(vendor):
    with pytest.raises(ValidationError) as exc:
        services.create_operation(vendor=vendor, op_type="delete", product_ids=[], operation_data={})
    assert exc.value.messages == ["product_ids array is required"]


def test_per_item_failure_is_recorded_and_processing_continues(vendor, make_product):
    good = make_product(title="Good", sku="G-1")
    gone = make_product(title="Gone", sku="X-9")
    op = _op(vendor, "status_update", [gone, good], {"new_status": "inactive"})
    Product.objects.filter(pk=gone.pk).delete()

    services.process_operation(op)

    op.refresh_from_db()
    assert op.status == BulkOperation.Status.COMPLETED
    assert (op.succeeded_count, op.failed_count, op.processed_count) == (1, 1, 2)
    assert op.errors[0]["product_id"] == gone.pk
    assert op.errors[0]["message"] == "Product not found"


def test_cancel_rules(vendor, make_product):
    product = make_product()
    op = _op(vendor, "delete", [product], {})
    op.cancel()
    assert op.status == BulkOperation.Status.CANCELLED

    # a cancelled operation is never picked up again
    services.process_operation(op)
    product.refresh_from_db()
    assert product.status == Product.Status.ACTIVE

    done = _op(vendor, "delete", [product], {})
    services.process_operation(done)
    with pytest.raises(ValidationError) as exc:
        done.cancel()
    assert exc.value.messages == ["Cannot cancel completed or failed operation"]


def test_error_list_is_bounded(settings, vendor, make_product):
    settings.MARKET_BULK_MAX_ERRORS = 3
    op = _op(vendor, "delete", [make_product()], {})
    for i in range(5):
        op.add_error(i, f"boom {i}")
    op.refresh_from_db()
    assert [e["product_id"] for e in op.errors] == [2, 3, 4]


def test_cancel_during_processing_stops_remaining_products(monkeypatch, vendor, make_product):
    products = [make_product(title=f"Lamp {i}") for i in range(3)]
    op = _op(vendor, "status_update", products, {"new_status": "inactive"})
    apply = services._apply_to_product

    def apply_then_cancel(operation, product_id):
        apply(operation, product_id)
        BulkOperation.objects.filter(pk=operation.pk).update(status=BulkOperation.Status.CANCELLED)

    monkeypatch.setattr(services, "_apply_to_product", apply_then_cancel)
    services.process_operation(op)

    statuses = [Product.objects.get(pk=p.pk).status for p in products]
    assert statuses == [Product.Status.INACTIVE, Product.Status.ACTIVE, Product.Status.ACTIVE]
    assert op.status == BulkOperation.Status.CANCELLED
    assert op.processed_count == 1


def test_unexpected_failure_marks_operation_failed(monkeypatch, vendor, make_product):
    op = _op(vendor, "delete", [make_product()], {})

    def broken_complete(self, result_file_url=""):
        raise RuntimeError("result storage unavailable")

    monkeypatch.setattr(BulkOperation, "complete", broken_complete)
    services.process_operation(op)

    op.refresh_from_db()
    assert op.status == BulkOperation.Status.FAILED
    assert op.completed_at is not None
    assert op.errors[-1] == {"product_id": None, "sku": None, "message": "result storage unavailable", "row": None}


def test_percentage_rounds_half_up(vendor, make_product):
    op = _op(vendor, "delete", [make_product(title=f"Cup {i}") for i in range(8)], {})
    op.update_progress(1, 1, 0)
    assert op.percentage == 13
    op.update_progress(3, 3, 0)
    assert op.percentage == 38


def test_fail_respects_error_cap(settings, vendor, make_product):
    settings.MARKET_BULK_MAX_ERRORS = 3
    op = _op(vendor, "delete", [make_product()], {})
    for i in range(3):
        op.add_error(i, f"boom {i}")

    op.fail("worker crashed")

    op.refresh_from_db()
    assert len(op.errors) == 3
    assert op.errors[-1]["message"] == "worker crashed"


def test_queued_operations_processed_by_command(settings, vendor, vendor_client, make_product):
    settings.MARKET_BULK_PROCESS_INLINE = False
    product = make_product(quantity=1)

    resp = vendor_client.post_json(
        "/api/vendors/bulk-operations/",
        {
            "type": "inventory_update",
            "product_ids": [product.pk],
            "operation_data": {"inventory_change": "set", "inventory_value": 40},
        },
    )
    assert resp.status_code == 201
    assert resp.json()["data"]["status"] == "pending"

    call_command("process_bulk_operations")

    product.refresh_from_db()
    assert product.quantity == 40
    assert BulkOperation.objects.get().status == BulkOperation.Status.COMPLETED


def test_http_flow(vendor_client, make_product):
    product = make_product(price=Decimal("100.00"))
    resp = vendor_client.post_json(
        "/api/vendors/bulk-operations/",
        {
            "type": "price_update",
            "product_ids": [product.pk],
            "operation_data": {"price_change": "percent_decrease", "price_value": 25},
        },
    )
    assert resp.status_code == 201
    op_id = resp.json()["data"]["id"]

    detail = vendor_client.get(f"/api/vendors/bulk-operations/{op_id}/").json()["data"]
    assert detail["status"] == "completed"
    assert detail["errors"] == []

    listing = vendor_client.get("/api/vendors/bulk-operations/?status=completed").json()["data"]
    assert [row["id"] for row in listing] == [op_id]

    resp = vendor_client.delete(f"/api/vendors/bulk-operations/{op_id}/")
    assert resp.status_code == 400


def test_customers_cannot_create(customer_client):
    resp = customer_client.post_json("/api/vendors/bulk-operations/", {"type": "delete", "product_ids": [1]})
    assert resp.status_code == 403


def test_unknown_operation_message(vendor_client):
    resp = vendor_client.get("/api/vendors/bulk-operations/999999/")
    assert resp.status_code == 404
    assert resp.json()["message"] == "Bulk operation not found"
