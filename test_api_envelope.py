from __future__ import annotations

import pytest

from orders.models import Order
from orders.services import OrderLine, create_order

pytestmark = pytest.mark.django_db


def test_health(anon_client):
    resp = anon_client.get("/api/health/")
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "data": {"status": "ok"}}
    assert resp["X-Request-ID"]


def test_request_id_is_echoed(anon_client):
    resp = anon_client.get("/api/health/", HTTP_X_REQUEST_ID="abc-123")
    assert resp["X-Request-ID"] == "abc-123"


def test_unknown_route_is_json_404(anon_client):
    resp = anon_client.get("/api/nope/")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Not found"}


def test_login_required_is_401(anon_client):
    resp = anon_client.get("/api/accounts/me/")
    assert resp.status_code == 401
    assert resp.json()["message"] == "Authentication required"


def test_me_lists_roles(vendor_client):
    data = vendor_client.get("/api/accounts/me/").json()["data"]
    assert data["roles"] == ["customer", "vendor"]


def test_invalid_json_body(vendor_client):
    resp = vendor_client.post("/api/products/", data="{not json", content_type="application/json")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Request body must be valid JSON"


def test_throttled_requests_get_429(vendor_client):
    statuses = [
        vendor_client.post_json("/api/vendors/bulk-operations/", {"type": "delete"}).status_code
        for _ in range(21)
    ]
    assert statuses[:20] == [400] * 20
    assert statuses[20] == 429


def test_product_create_update_and_visibility(vendor_client, anon_client, category):
    resp = vendor_client.post_json(
        "/api/products/",
        {"title": "Linen Apron", "price": "24.00", "category_id": category.pk, "tags": ["kitchen", "kitchen"]},
    )
    assert resp.status_code == 201
    product = resp.json()["data"]
    assert product["slug"] == "linen-apron"
    assert product["status"] == "draft"
    assert product["tags"] == ["kitchen"]

    # drafts are hidden from everyone but the owner
    assert anon_client.get(f"/api/products/{product['id']}/").status_code == 404
    assert vendor_client.get(f"/api/products/{product['id']}/").status_code == 200

    resp = vendor_client.put_json(f"/api/products/{product['id']}/", {"status": "active"})
    assert resp.json()["data"]["status"] == "active"

    listing = anon_client.get("/api/products/").json()
    assert [p["id"] for p in listing["data"]] == [product["id"]]
    assert listing["pagination"]["total"] == 1


def test_customers_cannot_create_products(customer_client):
    resp = customer_client.post_json("/api/products/", {"title": "Nope"})
    assert resp.status_code == 403


def test_orders_are_private(customer, customer_client, client_for, other_vendor, make_product):
    order = create_order(customer=customer, lines=[OrderLine(product=make_product(), quantity=2)])
    assert order.total_cents == 20000

    mine = customer_client.get("/api/orders/").json()["data"]
    assert [o["order_number"] for o in mine] == [order.order_number]

    assert client_for(other_vendor).get(f"/api/orders/{order.pk}/").status_code == 404


def test_admin_sets_order_status(customer, admin_client_json, make_product):
    order = create_order(customer=customer, lines=[OrderLine(product=make_product())])

    resp = admin_client_json.put_json(f"/api/orders/{order.pk}/status/", {"status": "delivered"})
    assert resp.status_code == 200
    order.refresh_from_db()
    assert order.status == Order.Status.DELIVERED
    assert order.events.filter(type="status_changed").exists()

    resp = admin_client_json.put_json(f"/api/orders/{order.pk}/status/", {"status": "lost"})
    assert resp.status_code == 400
