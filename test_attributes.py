from __future__ import annotations

import pytest
from django.core.exceptions import ValidationError

from catalog import services
from catalog.models import Attribute, Category, CategoryAttribute

pytestmark = pytest.mark.django_db


def _attr(name, type_="text", **extra):
    data = {"name": name, "type": type_, **extra}
    if type_ in Attribute.OPTION_TYPES and "options" not in data:
        data["options"] = [{"value": "a"}, {"value": "b"}]
    return services.create_attribute(data)


def test_filter_by_type_returns_exact_subset():
    for i in range(3):
        _attr(f"Color {i}", "color")
    for i in range(2):
        _attr(f"Note {i}")
    _attr("Weight", "number", is_filterable=True)

    colors = services.filter_attributes(type="color")
    assert colors.count() == 3
    assert {a.type for a in colors} == {"color"}
    assert [a.name for a in services.filterable_attributes()] == ["Weight"]


def test_option_types_require_options():
    with pytest.raises(ValidationError) as exc:
        services.create_attribute({"name": "Size", "type": "select", "options": []})
    assert "Options are required" in str(exc.value)


def test_duplicate_name_rejected():
    _attr("Material")
    with pytest.raises(ValidationError) as exc:
        _attr("material")
    assert "already exists" in str(exc.value)


def test_type_change_blocked_while_assigned():
    attr = _attr("Brand")
    services.assign_attribute(Category.objects.create(name="Shoes"), attr)
    with pytest.raises(ValidationError) as exc:
        services.update_attribute(attr, {"type": "number"})
    assert str(exc.value.messages[0]) == "Cannot change type of attribute that is assigned to categories"

    with pytest.raises(ValidationError):
        services.delete_attribute(attr)


def test_option_add_update_delete():
    attr = _attr("Finish", "select")
    services.add_option(attr, {"value": "matte", "label": "Matte"})
    option = attr.options[-1]
    assert option["label"] == "Matte"
    assert option["id"]

    with pytest.raises(ValidationError):
        services.add_option(attr, {"value": "matte"})

    services.update_option(attr, option["id"], {"label": "Matte black"})
    attr.refresh_from_db()
    assert attr.find_option(option["id"])["label"] == "Matte black"

    services.delete_option(attr, option["id"])
    attr.refresh_from_db()
    assert attr.find_option(option["id"]) is None


def test_text_attribute_rejects_options():
    attr = _attr("Care notes")
    with pytest.raises(ValidationError):
        services.add_option(attr, {"value": "x"})


def test_assign_with_propagation_and_removal():
    root = Category.objects.create(name="Clothing")
    child = Category.objects.create(name="Shirts", parent=root)
    grandchild = Category.objects.create(name="Polos", parent=child)
    attr = _attr("Fabric")

    services.assign_attribute(root, attr, propagate=True)
    inherited = CategoryAttribute.objects.filter(attribute=attr, is_inherited=True)
    assert set(inherited.values_list("category_id", flat=True)) == {child.pk, grandchild.pk}
    assert set(inherited.values_list("inherited_from_id", flat=True)) == {root.pk}

    with pytest.raises(ValidationError):
        services.assign_attribute(root, attr)

    services.remove_attribute(root, attr)
    assert not CategoryAttribute.objects.filter(attribute=attr).exists()

    with pytest.raises(ValidationError) as exc:
        services.remove_attribute(root, attr)
    assert "not assigned" in str(exc.value)


def test_attributes_for_category_lists_ancestor_assignments():
    root = Category.objects.create(name="Home")
    leaf = Category.objects.create(name="Lamps", parent=root)
    services.assign_attribute(root, _attr("Style"))
    services.assign_attribute(leaf, _attr("Wattage", "number"))

    result = services.attributes_for_category(leaf)
    assert [row["attribute"]["name"] for row in result["own"]] == ["Wattage"]
    assert [row["attribute"]["name"] for row in result["inherited"]] == ["Style"]
    assert result["inherited"][0]["inherited_from"] == {"id": root.pk, "name": "Home"}


def test_reorder_category_attributes():
    cat = Category.objects.create(name="Books")
    a, b = _attr("Author"), _attr("Publisher")
    services.assign_attribute(cat, a)
    services.assign_attribute(cat, b)

    services.reorder_category_attributes(
        cat, [{"attribute_id": a.pk, "sort_order": 5}, {"attribute_id": b.pk, "sort_order": 1}]
    )
    ordered = list(CategoryAttribute.objects.filter(category=cat).order_by("sort_order"))
    assert [link.attribute_id for link in ordered] == [b.pk, a.pk]


def test_non_numeric_sort_order_is_a_validation_error():
    cat = Category.objects.create(name="Games")
    attr = _attr("Players")
    services.assign_attribute(cat, attr)

    with pytest.raises(ValidationError) as exc:
        _attr("Edition", "select", options=[{"value": "S", "sort_order": "first"}])
    assert exc.value.message_dict == {"sort_order": ["Must be a whole number."]}

    with pytest.raises(ValidationError):
        services.reorder_category_attributes(cat, [{"attribute_id": attr.pk, "sort_order": "top"}])
    with pytest.raises(ValidationError):
        services.update_category_attribute(cat, attr, {"sort_order": "1.5x"})
    with pytest.raises(ValidationError):
        services.assign_attribute(cat, _attr("Genre"), sort_order="last")

    assert CategoryAttribute.objects.get(category=cat, attribute=attr).sort_order == 0


# ------------------------------------------------------------
# HTTP
# ------------------------------------------------------------
def test_attribute_endpoints_are_admin_only(vendor_client):
    resp = vendor_client.get("/api/attributes/")
    assert resp.status_code == 403
    assert resp.json()["success"] is False


def test_attribute_crud_over_http(admin_client_json):
    resp = admin_client_json.post_json(
        "/api/attributes/",
        {"name": "Colour", "type": "color", "options": [{"value": "red", "color_hex": "#ff0000"}]},
    )
    assert resp.status_code == 201
    attr_id = resp.json()["data"]["id"]

    resp = admin_client_json.post_json(f"/api/attributes/{attr_id}/options/", {"value": "blue"})
    assert resp.status_code == 201
    assert len(resp.json()["data"]["options"]) == 2

    resp = admin_client_json.get("/api/attributes/?type=color")
    body = resp.json()
    assert body["pagination"]["total"] == 1

    assert admin_client_json.delete(f"/api/attributes/{attr_id}/").status_code == 200
    assert admin_client_json.get(f"/api/attributes/{attr_id}/").status_code == 404


def test_category_attributes_public_read(anon_client, admin_client_json, category):
    attr = _attr("Season")
    resp = anon_client.post_json(f"/api/categories/{category.pk}/attributes/", {"attribute_id": attr.pk})
    assert resp.status_code == 401

    resp = admin_client_json.post_json(
        f"/api/categories/{category.pk}/attributes/",
        {"attribute_id": attr.pk, "is_required": True},
    )
    assert resp.status_code == 201

    resp = anon_client.get(f"/api/categories/{category.pk}/attributes/")
    assert resp.status_code == 200
    own = resp.json()["data"]["own"]
    assert own[0]["attribute"]["name"] == "Season"
    assert own[0]["is_required"] is True


def test_bad_option_sort_order_returns_400(admin_client_json):
    resp = admin_client_json.post_json(
        "/api/attributes/",
        {"name": "Size", "type": "select", "options": [{"value": "S", "sort_order": "first"}]},
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "sort_order: Must be a whole number."


def test_filterable_attributes_are_public(anon_client):
    _attr("Fabric", "select", is_filterable=True)
    _attr("Internal note")

    resp = anon_client.get("/api/attributes/filterable/")
    assert resp.status_code == 200
    assert [row["name"] for row in resp.json()["data"]] == ["Fabric"]
