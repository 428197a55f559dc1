from __future__ import annotations

from datetime import timedelta

import pytest
from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.utils import timezone

from products.services import update_product
from seo import services
from seo.models import UrlRedirect

pytestmark = pytest.mark.django_db


def _redirect(old, new, **extra):
    return services.create_redirect({"old_url": old, "new_url": new, **extra})


def test_old_url_is_normalized():
    redirect = _redirect("/Old-Page///", "/New-Page/")
    assert redirect.old_url == "/old-page"
    assert redirect.new_url == "/New-Page"
    assert services.find_redirect("/OLD-page/") == redirect


def test_find_skips_inactive_and_expired():
    _redirect("/gone", "/here", is_active=False)
    _redirect("/stale", "/here", expires_at=(timezone.now() - timedelta(days=1)).isoformat())
    assert services.find_redirect("/gone") is None
    assert services.find_redirect("/stale") is None


def test_duplicate_active_old_url_rejected():
    _redirect("/a", "/b")
    with pytest.raises(ValidationError):
        _redirect("/A/", "/c")


def test_chain_a_b_c_becomes_a_c():
    a = _redirect("/a", "/b")
    _redirect("/b", "/c")

    assert services.resolve_chain("/a") == {"url": "/c", "is_circular": False, "depth": 2}
    assert services.fix_chains() == 1

    a.refresh_from_db()
    assert a.new_url == "/c"


def test_circular_chain_left_alone():
    x = _redirect("/x", "/y")
    _redirect("/y", "/x")

    assert services.resolve_chain("/x")["is_circular"] is True
    assert services.fix_chains() == 0
    x.refresh_from_db()
    assert x.new_url == "/y"


def test_record_hit_tracks_days_and_referrers(settings):
    settings.MARKET_REDIRECT_REFERRERS_KEEP = 2
    redirect = _redirect("/promo", "/sale")

    services.record_hit(redirect, "https://a.example")
    services.record_hit(redirect, "https://a.example")
    services.record_hit(redirect, "https://b.example")
    services.record_hit(redirect, "https://c.example")
    services.record_hit(redirect)

    redirect.refresh_from_db()
    assert redirect.hit_count == 5
    assert redirect.daily_hits == [{"date": timezone.localdate().isoformat(), "count": 5}]
    assert len(redirect.referrers) == 2
    assert redirect.referrers[0]["url"] == "https://a.example"
    assert redirect.referrers[0]["count"] == 2


def test_slug_change_creates_redirect(vendor, make_product):
    product = make_product(title="Wool Hat")
    old_path = product.storefront_path()

    update_product(product, {"slug": "warm-wool-hat"})

    redirect = services.find_redirect(old_path)
    assert redirect.new_url == f"/shop/{vendor.pk}/warm-wool-hat"
    assert redirect.reason == UrlRedirect.Reason.SLUG_CHANGE
    assert redirect.entity_type == UrlRedirect.EntityType.PRODUCT
    assert redirect.entity_id == product.pk


def test_renaming_back_does_not_loop(make_product):
    product = make_product(title="Scarf")
    original = product.storefront_path()

    update_product(product, {"slug": "long-scarf"})
    update_product(product, {"slug": "scarf"})

    assert services.find_redirect(original) is None
    assert services.find_redirect(product.storefront_path("long-scarf")).new_url == original


def test_bulk_create_reports_bad_rows():
    result = services.bulk_create(
        [
            {"old_url": "/one", "new_url": "/uno"},
            {"old_url": "/two", "new_url": "/dos", "redirect_type": 302},
            {"old_url": "/one", "new_url": "/again"},
            {"old_url": "", "new_url": "/nothing"},
        ]
    )
    assert result["created"] == 2
    assert result["failed"] == 2
    assert [e["index"] for e in result["errors"]] == [2, 3]


def test_cleanup():
    _redirect("/expired", "/x", expires_at=(timezone.now() - timedelta(days=2)).isoformat())
    _redirect("/inactive", "/x", is_active=False)
    old = _redirect("/unused", "/x")
    UrlRedirect.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=400))
    _redirect("/fresh", "/x")

    assert services.cleanup() == 1
    assert services.cleanup(delete_inactive=True, delete_unused=True, unused_days=365) == 2
    assert list(UrlRedirect.objects.values_list("old_url", flat=True)) == ["/fresh"]


def test_cleanup_command_fixes_chains():
    a = _redirect("/p", "/q")
    _redirect("/q", "/r")
    call_command("cleanup_redirects", "--fix-chains")
    a.refresh_from_db()
    assert a.new_url == "/r"


# ------------------------------------------------------------
# Middleware / HTTP
# ------------------------------------------------------------
def test_middleware_redirects_with_stored_code(anon_client):
    _redirect("/old-shop", "/new-shop", redirect_type=308)

    resp = anon_client.get("/old-shop/?ref=mail", HTTP_REFERER="https://news.example")
    assert resp.status_code == 308
    assert resp["Location"] == "/new-shop?ref=mail"
    assert UrlRedirect.objects.get().hit_count == 1


def test_middleware_ignores_api_and_non_get(anon_client):
    _redirect("/api/health", "/elsewhere")
    _redirect("/legacy", "/current")

    assert anon_client.get("/api/health/").status_code == 200
    assert anon_client.post("/legacy").status_code != 301
    assert UrlRedirect.objects.filter(hit_count__gt=0).count() == 0


def test_admin_endpoints(admin_client_json, vendor_client):
    assert vendor_client.get("/api/admin/redirects/").status_code == 403

    resp = admin_client_json.post_json("/api/admin/redirects/", {"old_url": "/m", "new_url": "/n"})
    assert resp.status_code == 201
    redirect_id = resp.json()["data"]["id"]

    resp = admin_client_json.post_json("/api/admin/redirects/", {"old_url": "/m", "new_url": "/o"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "A redirect for this URL already exists"

    resp = admin_client_json.post_json(
        "/api/admin/redirects/import/", {"redirects": [{"old_url": "/n", "new_url": "/z"}]}
    )
    assert resp.json()["data"]["created"] == 1

    assert admin_client_json.post_json("/api/admin/redirects/fix-chains/").json()["data"] == {"fixed": 1}

    stats = admin_client_json.get("/api/admin/redirects/stats/").json()["data"]
    assert stats["total"] == 2
    assert stats["active"] == 2

    listing = admin_client_json.get("/api/admin/redirects/?search=/m").json()
    assert [r["new_url"] for r in listing["data"]] == ["/z"]

    resp = admin_client_json.put_json(f"/api/admin/redirects/{redirect_id}/", {"redirect_type": 302})
    assert resp.json()["data"]["redirect_type"] == 302

    assert admin_client_json.delete(f"/api/admin/redirects/{redirect_id}/").status_code == 200
    assert UrlRedirect.objects.count() == 1
