from __future__ import annotations

from datetime import timedelta

import pytest
from django.core.exceptions import PermissionDenied, ValidationError
from django.core.files.uploadedfile import SimpleUploadedFile
from django.http import Http404
from django.utils import timezone

from downloads import services
from downloads.models import DigitalAsset, DownloadLog, LicenseKey
from orders.models import Order
from orders.services import OrderLine, create_order, update_status
from products.models import Product

pytestmark = pytest.mark.django_db

PDF_BYTES = b"%PDF-1.4 test guide"


@pytest.fixture
def digital_product(make_product):
    return make_product(title="Knitting Guide", kind=Product.Kind.DIGITAL)


def _upload(product, vendor, **data):
    return services.create_asset(
        product,
        vendor=vendor,
        uploaded_file=SimpleUploadedFile("Guide.PDF", PDF_BYTES, content_type="application/pdf"),
        data=data,
    )


def _delivered_order(customer, product, status=Order.Status.DELIVERED):
    order = create_order(customer=customer, lines=[OrderLine(product=product)])
    update_status(order, status)
    return order


# ------------------------------------------------------------
# Model behaviour
# ------------------------------------------------------------
def test_asset_helpers():
    asset = DigitalAsset(filename="Pattern.ZIP", size=1536)
    assert asset.file_extension == "zip"
    assert asset.formatted_size == "1.50 KB"
    assert DigitalAsset(filename="README").file_extension is None
    assert DigitalAsset(filename="x").formatted_size == "Unknown"
    assert DigitalAsset(asset_type="file").has_available_keys() is True


def test_can_download_reason_order():
    log = DownloadLog(download_limit=1, download_count=1, is_active=False,
                      token_expires_at=timezone.now() - timedelta(hours=1))
    assert log.can_download() == (False, "Download access has been revoked")
    log.is_active = True
    assert log.can_download() == (False, "Download link has expired")
    log.token_expires_at = None
    assert log.can_download() == (False, "Download limit reached")
    log.download_limit = 0
    assert log.can_download() == (True, None)
    assert log.remaining_downloads == "Unlimited"


def test_history_is_bounded(settings, customer, vendor, digital_product):
    settings.MARKET_DOWNLOAD_HISTORY_LIMIT = 2
    asset = _upload(digital_product, vendor)
    order = _delivered_order(customer, digital_product)
    log = DownloadLog.for_order(order=order, user=customer, asset=asset)
    log.save()

    for i in range(4):
        log.record_download(f"10.0.0.{i}", "pytest")

    log.refresh_from_db()
    assert log.download_count == 4
    assert [h["ip_address"] for h in log.download_history] == ["10.0.0.2", "10.0.0.3"]


def test_refresh_token(customer, vendor, digital_product):
    asset = _upload(digital_product, vendor)
    log = DownloadLog.for_order(order=_delivered_order(customer, digital_product), user=customer, asset=asset)
    log.save()
    old = log.access_token

    log.refresh_token(24)
    assert log.access_token != old
    assert log.token_expires_at > timezone.now() + timedelta(hours=23)


# ------------------------------------------------------------
# License keys
# ------------------------------------------------------------
def test_add_license_keys_splits_and_trims(vendor, digital_product):
    asset = _upload(digital_product, vendor, asset_type="license_key")
    added = services.add_license_keys(asset, " AAA-1 ,BBB-2\n\n  CCC-3 ,")
    assert added == 3
    assert list(asset.license_keys.values_list("key", flat=True)) == ["AAA-1", "BBB-2", "CCC-3"]
    assert services.license_key_stats(asset) == {"total": 3, "used": 0, "available": 3}


def test_each_key_is_handed_out_once(customer, vendor, digital_product):
    asset = _upload(digital_product, vendor, asset_type="both")
    services.add_license_keys(asset, "K1,K2")
    order = _delivered_order(customer, digital_product)

    first = services.assign_license_key(asset, customer, order)
    second = services.assign_license_key(asset, customer, order)
    third = services.assign_license_key(asset, customer, order)

    assert {first.key, second.key} == {"K1", "K2"}
    assert third is None
    assert LicenseKey.objects.filter(asset=asset, is_used=True, used_by=customer).count() == 2
    assert asset.has_available_keys() is False


# ------------------------------------------------------------
# Delivery
# ------------------------------------------------------------
def _fetch(order, asset, customer):
    issued = services.issue_download(order_id=order.pk, asset_id=asset.pk, user=customer)
    token = issued["download_url"].rstrip("/").rsplit("/", 1)[-1]
    response = services.serve_token_download(token, ip_address="10.0.0.1")
    response.close()
    return issued


def test_limit_of_three_rejects_fourth_download(customer, vendor, digital_product):
    asset = _upload(digital_product, vendor, download_limit=3)
    order = _delivered_order(customer, digital_product)

    remaining = [_fetch(order, asset, customer)["remaining_downloads"] for _ in range(3)]
    assert remaining == [3, 2, 1]

    with pytest.raises(PermissionDenied) as exc:
        services.issue_download(order_id=order.pk, asset_id=asset.pk, user=customer)
    assert str(exc.value) == "Download limit reached"
    assert order.events.filter(type="download").count() == 3

    log = DownloadLog.objects.get(order=order, asset=asset)
    assert log.download_count == 3
    assert log.download_history[-1]["ip_address"] == "10.0.0.1"


def test_issuing_a_local_link_does_not_count(customer, vendor, digital_product):
    asset = _upload(digital_product, vendor, download_limit=1)
    order = _delivered_order(customer, digital_product)

    for _ in range(3):
        services.issue_download(order_id=order.pk, asset_id=asset.pk, user=customer)

    assert DownloadLog.objects.get(order=order, asset=asset).download_count == 0


def test_issue_download_assigns_license_key_once(customer, vendor, digital_product):
    asset = _upload(digital_product, vendor, asset_type="both")
    services.add_license_keys(asset, "ONLY-ONE")
    order = _delivered_order(customer, digital_product)

    first = services.issue_download(order_id=order.pk, asset_id=asset.pk, user=customer)
    again = services.issue_download(order_id=order.pk, asset_id=asset.pk, user=customer)

    assert first["license_key"] == again["license_key"] == "ONLY-ONE"
    assert first["download_url"].startswith("/api/downloads/")
    assert first["filename"] == "Guide.PDF"


def test_pending_order_not_eligible(customer, vendor, digital_product):
    asset = _upload(digital_product, vendor)
    order = create_order(customer=customer, lines=[OrderLine(product=digital_product)])

    with pytest.raises(Http404) as exc:
        services.issue_download(order_id=order.pk, asset_id=asset.pk, user=customer)
    assert str(exc.value) == "Order not found or not eligible for download"


def test_asset_must_belong_to_order(customer, vendor, digital_product, make_product):
    other = make_product(title="Other Guide", kind=Product.Kind.DIGITAL)
    asset = _upload(other, vendor)
    order = _delivered_order(customer, digital_product)

    with pytest.raises(Http404):
        services.issue_download(order_id=order.pk, asset_id=asset.pk, user=customer)


def test_refund_revokes_access(customer, vendor, digital_product):
    asset = _upload(digital_product, vendor)
    order = _delivered_order(customer, digital_product, status=Order.Status.COMPLETED)
    services.issue_download(order_id=order.pk, asset_id=asset.pk, user=customer)

    update_status(order, Order.Status.REFUNDED)

    with pytest.raises(PermissionDenied) as exc:
        services.issue_download(order_id=order.pk, asset_id=asset.pk, user=customer)
    assert str(exc.value) == "Download access has been revoked"


def test_upload_requires_digital_product_and_file(vendor, make_product, digital_product):
    with pytest.raises(ValidationError) as exc:
        _upload(make_product(title="Mug"), vendor)
    assert exc.value.messages == ["Product must be digital type to add digital assets"]

    with pytest.raises(ValidationError) as exc:
        services.create_asset(digital_product, vendor=vendor, uploaded_file=None, data={})
    assert exc.value.messages == ["No file uploaded"]


# ------------------------------------------------------------
# HTTP
# ------------------------------------------------------------
def test_vendor_upload_and_license_keys_over_http(vendor_client, digital_product):
    base = f"/api/products/{digital_product.pk}/digital-assets/"
    resp = vendor_client.post(
        base,
        {
            "file": SimpleUploadedFile("pack.zip", b"PK\x03\x04", content_type="application/zip"),
            "asset_type": "license_key",
            "download_limit": "5",
        },
    )
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["download_limit"] == 5
    assert data["file_extension"] == "zip"
    asset_id = data["id"]

    resp = vendor_client.post_json(f"{base}{asset_id}/license-keys/", {"keys": "A\nB\nC"})
    assert resp.status_code == 201
    assert resp.json()["message"] == "License keys added. Total: 3, Available: 3"

    resp = vendor_client.post_json(f"{base}{asset_id}/license-keys/", {"keys": ""})
    assert resp.status_code == 400
    assert resp.json()["message"] == "keys string is required (newline or comma separated)"

    resp = vendor_client.put_json(f"{base}{asset_id}/", {"expiry_hours": 48, "filename": "ignored.exe"})
    assert resp.json()["data"]["expiry_hours"] == 48
    assert resp.json()["data"]["filename"] == "pack.zip"


def test_other_vendor_cannot_manage_assets(client_for, other_vendor, digital_product):
    resp = client_for(other_vendor).get(f"/api/products/{digital_product.pk}/digital-assets/")
    assert resp.status_code == 403


def test_customer_download_flow_over_http(customer, customer_client, vendor, digital_product):
    asset = _upload(digital_product, vendor, download_limit=2)
    order = _delivered_order(customer, digital_product)

    resp = customer_client.get(f"/api/orders/{order.pk}/downloads/{asset.pk}/")
    assert resp.status_code == 200
    url = resp.json()["data"]["download_url"]

    file_resp = customer_client.get(url)
    assert file_resp.status_code == 200
    assert b"".join(file_resp.streaming_content) == PDF_BYTES
    assert "attachment" in file_resp["Content-Disposition"]

    mine = customer_client.get("/api/downloads/").json()["data"]
    assert mine[0]["order_number"] == order.order_number
    assert mine[0]["remaining_downloads"] == 1


def test_expired_token_link(customer, customer_client, vendor, digital_product):
    asset = _upload(digital_product, vendor)
    order = _delivered_order(customer, digital_product)
    services.issue_download(order_id=order.pk, asset_id=asset.pk, user=customer)

    log = DownloadLog.objects.get(order=order, asset=asset)
    DownloadLog.objects.filter(pk=log.pk).update(token_expires_at=timezone.now() - timedelta(minutes=1))

    resp = customer_client.get(f"/api/downloads/{log.access_token}/")
    assert resp.status_code == 403
    assert resp.json()["message"] == "Download link has expired"


def test_token_link_stops_at_download_limit(customer, customer_client, vendor, digital_product):
    asset = _upload(digital_product, vendor, download_limit=1)
    order = _delivered_order(customer, digital_product)
    url = customer_client.get(f"/api/orders/{order.pk}/downloads/{asset.pk}/").json()["data"]["download_url"]

    first = customer_client.get(url)
    assert first.status_code == 200
    first.close()

    statuses = [customer_client.get(url).status_code for _ in range(3)]
    assert statuses == [403, 403, 403]
    assert customer_client.get(url).json()["message"] == "Download limit reached"

    log = DownloadLog.objects.get(order=order, asset=asset)
    assert (log.download_count, log.download_limit) == (1, 1)


def test_refresh_rotates_token_and_keeps_expiry(customer, customer_client, vendor, digital_product):
    asset = _upload(digital_product, vendor, expiry_hours=48)
    order = _delivered_order(customer, digital_product)
    services.issue_download(order_id=order.pk, asset_id=asset.pk, user=customer)
    log = DownloadLog.objects.get(order=order, asset=asset)

    resp = customer_client.post_json(f"/api/downloads/{log.pk}/refresh/", {"expiry_hours": 720})
    assert resp.status_code == 200
    assert resp.json()["message"] == "Download link refreshed"

    refreshed = DownloadLog.objects.get(pk=log.pk)
    assert refreshed.access_token != log.access_token
    assert refreshed.token_expires_at == log.token_expires_at
    assert resp.json()["data"]["download_url"] == f"/api/downloads/{refreshed.access_token}/"
    assert customer_client.get(f"/api/downloads/{log.access_token}/").status_code == 404


def test_expired_download_cannot_be_refreshed(customer, customer_client, vendor, digital_product):
    asset = _upload(digital_product, vendor, expiry_hours=1)
    order = _delivered_order(customer, digital_product)
    services.issue_download(order_id=order.pk, asset_id=asset.pk, user=customer)
    log = DownloadLog.objects.get(order=order, asset=asset)
    DownloadLog.objects.filter(pk=log.pk).update(token_expires_at=timezone.now() - timedelta(days=3))

    resp = customer_client.post_json(f"/api/downloads/{log.pk}/refresh/", {"expiry_hours": 720})
    assert resp.status_code == 403
    assert resp.json()["message"] == "Download link has expired"

    with pytest.raises(PermissionDenied):
        services.issue_download(order_id=order.pk, asset_id=asset.pk, user=customer)


def test_refresh_is_owner_only(client_for, other_vendor, customer, vendor, digital_product):
    asset = _upload(digital_product, vendor)
    order = _delivered_order(customer, digital_product)
    services.issue_download(order_id=order.pk, asset_id=asset.pk, user=customer)
    log = DownloadLog.objects.get(order=order, asset=asset)

    resp = client_for(other_vendor).post_json(f"/api/downloads/{log.pk}/refresh/", {})
    assert resp.status_code == 404
    assert resp.json()["message"] == "Download not found"


def test_download_endpoints_need_login(anon_client):
    assert anon_client.get("/api/downloads/").status_code == 401


def test_unknown_asset_message(vendor_client, digital_product):
    resp = vendor_client.get(f"/api/products/{digital_product.pk}/digital-assets/999999/")
    assert resp.status_code == 404
    assert resp.json()["message"] == "Digital asset not found"
