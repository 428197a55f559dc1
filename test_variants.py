from __future__ import annotations

from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError

from products import services
from products.models import ProductVariant

pytestmark = pytest.mark.django_db

SIZES = {"name": "Size", "values": ["S", "M", "L"]}
COLORS = {"name": "Color", "values": ["Red", "Blue"]}


def test_cartesian_product():
    assert services.cartesian(["a", "b"], [1, 2]) == [("a", 1), ("a", 2), ("b", 1), ("b", 2)]
    assert services.cartesian() == [()]


@pytest.mark.parametrize(
    "change,value,expected",
    [
        ("set", "42", "42.00"),
        ("increase", "5.50", "105.50"),
        ("decrease", "150", "0.00"),
        ("percent_increase", "10", "110.00"),
        ("percent_decrease", "12.5", "87.50"),
    ],
)
def test_apply_price_change(change, value, expected):
    assert services.apply_price_change(Decimal("100.00"), change, value) == Decimal(expected)


def test_apply_quantity_change_never_negative():
    assert services.apply_quantity_change(4, "adjust", -10) == 0
    assert services.apply_quantity_change(4, "set", 9) == 9


def test_two_by_three_options_give_six_variants(make_product):
    product = make_product()
    variants = services.generate_variants(product, [COLORS, SIZES])

    assert len(variants) == 6
    assert [v.title for v in variants[:3]] == ["Red / S", "Red / M", "Red / L"]
    assert all(v.price == Decimal("100.00") for v in variants)

    product.refresh_from_db()
    assert product.has_variants is True
    assert product.options == [COLORS, SIZES]


def test_regenerating_replaces_existing_variants(make_product):
    product = make_product()
    services.generate_variants(product, [COLORS, SIZES])
    services.generate_variants(product, [SIZES], base_price="12.5")

    variants = list(ProductVariant.objects.filter(product=product))
    assert len(variants) == 3
    assert {v.price for v in variants} == {Decimal("12.50")}


def test_no_options_gives_single_default_variant(make_product):
    product = make_product()
    variants = services.generate_variants(product, [])
    assert [v.title for v in variants] == ["Default"]
    product.refresh_from_db()
    assert product.has_variants is False


def test_more_than_three_option_types_rejected(make_product):
    product = make_product()
    options = [{"name": f"O{i}", "values": ["x"]} for i in range(4)]
    with pytest.raises(ValidationError) as exc:
        services.generate_variants(product, options)
    assert "Maximum 3 option types allowed" in exc.value.messages


def test_find_variant_and_inventory(make_product):
    product = make_product()
    services.generate_variants(product, [COLORS, SIZES])
    ProductVariant.objects.filter(product=product).update(quantity=2)

    variant = services.find_variant_by_options(product, "Blue", "M")
    assert variant.title == "Blue / M"
    assert services.find_variant_by_options(product, "Green") is None
    assert services.total_inventory(product) == 12


def test_bulk_update_subset(make_product):
    product = make_product()
    variants = services.generate_variants(product, [SIZES])
    target = [variants[0].pk, variants[1].pk]

    changed = services.bulk_update_variants(
        product, field="price", action="percent_increase", value="10", variant_ids=target
    )
    assert changed == 2
    prices = dict(ProductVariant.objects.filter(product=product).values_list("pk", "price"))
    assert prices[variants[0].pk] == Decimal("110.00")
    assert prices[variants[2].pk] == Decimal("100.00")

    with pytest.raises(ValidationError):
        services.bulk_update_variants(product, field="price", action="adjust", value="1")


def test_deleting_last_variant_clears_flags(make_product):
    product = make_product()
    services.generate_variants(product, [{"name": "Size", "values": ["S", "M"]}])
    for variant in list(ProductVariant.objects.filter(product=product)):
        services.delete_variant(product, variant.pk)

    product.refresh_from_db()
    assert product.has_variants is False
    assert product.options == []


# ------------------------------------------------------------
# HTTP
# ------------------------------------------------------------
def test_generate_over_http(vendor_client, make_product):
    product = make_product()
    resp = vendor_client.post_json(
        f"/api/products/{product.pk}/variants/",
        {"options": [COLORS, SIZES], "base_price": "20"},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["count"] == 6

    resp = vendor_client.get(f"/api/products/{product.pk}/variants/find/?option1=Red&option2=L")
    assert resp.json()["data"]["title"] == "Red / L"

    resp = vendor_client.get(f"/api/products/{product.pk}/variants/find/?option1=Green")
    assert resp.status_code == 404
    assert resp.json()["message"] == "Variant not found for specified options"


def test_other_vendor_cannot_generate(client_for, other_vendor, make_product):
    product = make_product()
    resp = client_for(other_vendor).post_json(f"/api/products/{product.pk}/variants/", {"options": [SIZES]})
    assert resp.status_code == 403
    assert resp.json()["message"] == "Not authorized to modify this product"


def test_variant_list_is_public(anon_client, make_product):
    product = make_product()
    services.generate_variants(product, [SIZES])
    resp = anon_client.get(f"/api/products/{product.pk}/variants/")
    assert resp.status_code == 200
    assert [v["title"] for v in resp.json()["data"]] == ["S", "M", "L"]
