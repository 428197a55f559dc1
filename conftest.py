from __future__ import annotations

import json
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import Client

from catalog.models import Category
from products.models import Product

User = get_user_model()


@pytest.fixture(autouse=True)
def _clear_throttle_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture(autouse=True)
def _media_root(settings, tmp_path):
    settings.MEDIA_ROOT = str(tmp_path / "media")


def _user(username: str, *, vendor: bool = False, staff: bool = False):
    user = User.objects.create_user(username=username, email=f"{username}@test.local", password="pass12345")
    if staff:
        user.is_staff = True
        user.save(update_fields=["is_staff"])
    if vendor:
        user.profile.is_vendor = True
        user.profile.save(update_fields=["is_vendor"])
    return user


@pytest.fixture
def customer(db):
    return _user("buyer")


@pytest.fixture
def vendor(db):
    return _user("seller", vendor=True)


@pytest.fixture
def other_vendor(db):
    return _user("rival", vendor=True)


@pytest.fixture
def admin_user(db):
    return _user("staff", staff=True)


class JsonClient(Client):
    """Test client that sends dict bodies as JSON."""

    def _json(self, method, path, data=None, **extra):
        body = json.dumps(data) if data is not None else ""
        return getattr(super(), method)(path, data=body, content_type="application/json", **extra)

    def post_json(self, path, data=None, **extra):
        return self._json("post", path, data, **extra)

    def put_json(self, path, data=None, **extra):
        return self._json("put", path, data, **extra)


def _client_for(user=None) -> JsonClient:
    client = JsonClient()
    if user is not None:
        client.force_login(user)
    return client


@pytest.fixture
def anon_client():
    return _client_for()


@pytest.fixture
def customer_client(customer):
    return _client_for(customer)


@pytest.fixture
def vendor_client(vendor):
    return _client_for(vendor)


@pytest.fixture
def admin_client_json(admin_user):
    return _client_for(admin_user)


@pytest.fixture
def category(db):
    return Category.objects.create(name="Apparel")


@pytest.fixture
def make_product(vendor):
    def _make(**kwargs) -> Product:
        defaults = {
            "vendor": vendor,
            "title": "Cotton Tee",
            "price": Decimal("100.00"),
            "quantity": 10,
            "status": Product.Status.ACTIVE,
        }
        defaults.update(kwargs)
        return Product.objects.create(**defaults)

    return _make


@pytest.fixture
def client_for(db):
    return _client_for
