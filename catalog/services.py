# catalog/services.py

from __future__ import annotations

import logging
import uuid
from typing import Any, Optional

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import QuerySet

from core.utils import simple_slug

from .models import Attribute, Category, CategoryAttribute

logger = logging.getLogger(__name__)

ATTRIBUTE_FIELDS = (
    "name",
    "type",
    "description",
    "validation",
    "is_filterable",
    "is_searchable",
    "is_visible_on_product",
    "is_required",
    "sort_order",
    "is_active",
)


def _sort_order(raw: Any) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError({"sort_order": "Must be a whole number."})


# ============================================================
# Attributes
# ============================================================
def filter_attributes(
    *,
    type: Optional[str] = None,
    is_filterable: Optional[bool] = None,
    is_active: Optional[bool] = None,
) -> QuerySet[Attribute]:
    qs = Attribute.objects.all()
    if type:
        qs = qs.filter(type=type)
    if is_filterable is not None:
        qs = qs.filter(is_filterable=is_filterable)
    if is_active is not None:
        qs = qs.filter(is_active=is_active)
    return qs.order_by("sort_order", "name")


def filterable_attributes() -> QuerySet[Attribute]:
    return Attribute.objects.filter(is_filterable=True, is_active=True).order_by("sort_order")


def _normalize_option(raw: dict, *, default_sort: int) -> dict:
    value = str(raw.get("value") or "").strip()
    if not value:
        raise ValidationError({"options": "Each option needs a value."})
    return {
        "id": str(raw.get("id") or uuid.uuid4().hex),
        "value": value,
        "label": str(raw.get("label") or value),
        "color_hex": raw.get("color_hex") or None,
        "sort_order": _sort_order(raw.get("sort_order") if raw.get("sort_order") is not None else default_sort),
    }


def normalize_options(raw_options: Any) -> list[dict]:
    if raw_options in (None, ""):
        return []
    if not isinstance(raw_options, list):
        raise ValidationError({"options": "Options must be a list."})
    out: list[dict] = []
    seen: set[str] = set()
    for idx, raw in enumerate(raw_options):
        if not isinstance(raw, dict):
            raise ValidationError({"options": "Each option must be an object."})
        opt = _normalize_option(raw, default_sort=idx)
        if opt["value"] in seen:
            raise ValidationError({"options": f"Duplicate option value '{opt['value']}'."})
        seen.add(opt["value"])
        out.append(opt)
    return out


def _ensure_unique_name(name: str, *, exclude_pk: Optional[int] = None) -> None:
    qs = Attribute.objects.filter(slug=simple_slug(name)[:120])
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    if qs.exists():
        raise ValidationError("Attribute with this name already exists")


def _save_attribute(attribute: Attribute) -> Attribute:
    attribute.full_clean(exclude=["slug"])
    try:
        with transaction.atomic():
            attribute.save()
    except IntegrityError:
        raise ValidationError("Attribute with this name already exists")
    return attribute


def create_attribute(data: dict) -> Attribute:
    attr_type = data.get("type")
    options = normalize_options(data.get("options"))

    if attr_type in Attribute.OPTION_TYPES and not options:
        raise ValidationError("Options are required for select, multi_select, and color types")

    name = (data.get("name") or "").strip()
    if not name:
        raise ValidationError({"name": "Attribute name is required"})
    _ensure_unique_name(name)

    attribute = Attribute(options=options)
    for field in ATTRIBUTE_FIELDS:
        if data.get(field) is not None:
            setattr(attribute, field, data[field])
    attribute.name = name

    _save_attribute(attribute)
    logger.info("Attribute created id=%s slug=%s type=%s", attribute.pk, attribute.slug, attribute.type)
    return attribute


def attribute_in_use(attribute: Attribute) -> bool:
    return CategoryAttribute.objects.filter(attribute=attribute).exists()


def update_attribute(attribute: Attribute, data: dict) -> Attribute:
    new_type = data.get("type")
    if new_type and new_type != attribute.type and attribute_in_use(attribute):
        raise ValidationError("Cannot change type of attribute that is assigned to categories")

    if data.get("name") is not None:
        name = str(data["name"]).strip()
        _ensure_unique_name(name, exclude_pk=attribute.pk)
        data = {**data, "name": name}

    for field in ATTRIBUTE_FIELDS:
        if data.get(field) is not None:
            setattr(attribute, field, data[field])
    if data.get("options") is not None:
        attribute.options = normalize_options(data["options"])

    return _save_attribute(attribute)


def delete_attribute(attribute: Attribute) -> None:
    if attribute_in_use(attribute):
        raise ValidationError(
            "Cannot delete attribute that is assigned to categories. Remove from all categories first."
        )
    attribute.delete()


def add_option(attribute: Attribute, data: dict) -> Attribute:
    if not attribute.uses_options:
        raise ValidationError(
            "Options can only be added to select, multi_select, or color type attributes"
        )

    value = str(data.get("value") or "").strip()
    options = list(attribute.options or [])
    if any(opt.get("value") == value for opt in options):
        raise ValidationError("Option with this value already exists")

    options.append(
        _normalize_option(
            {
                "value": value,
                "label": data.get("label") or value,
                "color_hex": data.get("color_hex"),
                "sort_order": data.get("sort_order"),
            },
            default_sort=len(options),
        )
    )
    attribute.options = options
    attribute.save(update_fields=["options", "updated_at"])
    return attribute


def update_option(attribute: Attribute, option_id: str, data: dict) -> Attribute:
    option = attribute.find_option(option_id)
    if option is None:
        raise ValidationError("Option not found")

    new_value = data.get("value")
    if new_value is not None and new_value != option.get("value"):
        if any(o.get("value") == new_value for o in attribute.options if o is not option):
            raise ValidationError("Option with this value already exists")

    for key in ("value", "label", "color_hex", "sort_order"):
        if data.get(key) is not None:
            option[key] = data[key]

    attribute.save(update_fields=["options", "updated_at"])
    return attribute


def delete_option(attribute: Attribute, option_id: str) -> Attribute:
    if attribute.find_option(option_id) is None:
        raise ValidationError("Option not found")
    attribute.options = [o for o in attribute.options if str(o.get("id")) != str(option_id)]
    attribute.save(update_fields=["options", "updated_at"])
    return attribute


# ============================================================
# Category <-> Attribute assignment
# ============================================================
def attributes_for_category(category: Category) -> dict[str, list[dict]]:
    """Own assignments plus the ones declared on ancestors."""
    own = (
        CategoryAttribute.objects.filter(category=category, is_inherited=False)
        .select_related("attribute")
        .order_by("sort_order", "id")
    )

    ancestors = category.ancestors()
    inherited: list[dict] = []
    if ancestors:
        rows = (
            CategoryAttribute.objects.filter(category__in=ancestors, is_inherited=False)
            .select_related("attribute", "category")
            .order_by("sort_order", "id")
        )
        for row in rows:
            item = row.as_dict()
            item["is_inherited"] = True
            item["inherited_from"] = {"id": row.category_id, "name": row.category.name}
            inherited.append(item)

    return {"own": [row.as_dict() for row in own], "inherited": inherited}


def propagate_to_children(category: Category, attribute: Attribute, *, source: Optional[Category] = None) -> int:
    """Create inherited rows in every descendant lacking one. Returns rows created."""
    source = source or category
    created = 0
    for child in category.children.all():
        if CategoryAttribute.objects.filter(category=child, attribute=attribute).exists():
            continue
        CategoryAttribute.objects.create(
            category=child,
            attribute=attribute,
            is_inherited=True,
            inherited_from=source,
        )
        created += 1
        created += propagate_to_children(child, attribute, source=source)
    return created


@transaction.atomic
def assign_attribute(
    category: Category,
    attribute: Attribute,
    *,
    is_required: bool = False,
    sort_order: Optional[int] = None,
    propagate: bool = False,
) -> CategoryAttribute:
    if CategoryAttribute.objects.filter(category=category, attribute=attribute).exists():
        raise ValidationError("Attribute already assigned to this category")

    if sort_order is None:
        sort_order = CategoryAttribute.objects.filter(category=category).count()

    link = CategoryAttribute.objects.create(
        category=category,
        attribute=attribute,
        is_required=bool(is_required),
        sort_order=_sort_order(sort_order),
    )
    if propagate:
        propagate_to_children(category, attribute)
    return link


@transaction.atomic
def remove_attribute(category: Category, attribute: Attribute) -> None:
    deleted, _ = CategoryAttribute.objects.filter(category=category, attribute=attribute).delete()
    if not deleted:
        raise ValidationError("Attribute not assigned to this category")
    CategoryAttribute.objects.filter(inherited_from=category, attribute=attribute).delete()


@transaction.atomic
def reorder_category_attributes(category: Category, order: Any) -> int:
    if not isinstance(order, list):
        raise ValidationError("Order must be an array")
    updated = 0
    for item in order:
        if not isinstance(item, dict):
            continue
        updated += CategoryAttribute.objects.filter(
            category=category, attribute_id=item.get("attribute_id")
        ).update(sort_order=_sort_order(item.get("sort_order") or 0))
    return updated


def update_category_attribute(category: Category, attribute: Attribute, data: dict) -> CategoryAttribute:
    link = CategoryAttribute.objects.filter(category=category, attribute=attribute).first()
    if link is None:
        raise CategoryAttribute.DoesNotExist("Attribute not assigned to this category")

    if data.get("is_required") is not None:
        link.is_required = bool(data["is_required"])
    if data.get("sort_order") is not None:
        link.sort_order = _sort_order(data["sort_order"])
    if data.get("overrides") is not None:
        if not isinstance(data["overrides"], dict):
            raise ValidationError({"overrides": "Overrides must be an object."})
        link.overrides = data["overrides"]
    link.save()
    return link
