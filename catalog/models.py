from __future__ import annotations

from django.db import models
from django.utils.text import slugify

from core.utils import simple_slug


class Category(models.Model):
    name = models.CharField(max_length=120)
    slug = models.SlugField(max_length=140)

    # Root categories have parent = NULL; any depth is allowed.
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name="children",
    )

    description = models.TextField(blank=True)

    is_active = models.BooleanField(default=True)
    sort_order = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = (("parent", "slug"),)
        indexes = [
            models.Index(fields=["parent", "is_active", "sort_order"], name="catalog_cat_parent_4a1e2d_idx"),
            models.Index(fields=["slug"], name="catalog_cat_slug_7b3c90_idx"),
        ]
        ordering = ["parent_id", "sort_order", "name"]
        verbose_name_plural = "Categories"

    def __str__(self) -> str:
        if self.parent:
            return f"{self.parent.name} > {self.name}"
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)[:140]
        super().save(*args, **kwargs)

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def ancestors(self) -> list["Category"]:
        """Parent first, root last. Stops on a cycle."""
        chain: list[Category] = []
        seen = {self.pk}
        node = self.parent
        while node is not None and node.pk not in seen:
            chain.append(node)
            seen.add(node.pk)
            node = node.parent
        return chain

    def as_dict(self) -> dict:
        return {
            "id": self.pk,
            "name": self.name,
            "slug": self.slug,
            "parent_id": self.parent_id,
            "is_active": self.is_active,
            "sort_order": self.sort_order,
        }


class Attribute(models.Model):
    class Type(models.TextChoices):
        TEXT = "text", "Text"
        NUMBER = "number", "Number"
        SELECT = "select", "Select"
        MULTI_SELECT = "multi_select", "Multi select"
        BOOLEAN = "boolean", "Boolean"
        COLOR = "color", "Color"
        DATE = "date", "Date"

    # Types whose values come from the options list
    OPTION_TYPES = (Type.SELECT, Type.MULTI_SELECT, Type.COLOR)

    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=120, unique=True)
    type = models.CharField(max_length=20, choices=Type.choices)
    description = models.CharField(max_length=500, blank=True)

    # [{"id", "value", "label", "color_hex", "sort_order"}]
    options = models.JSONField(default=list, blank=True)

    # {"min", "max", "min_length", "max_length", "pattern"}
    validation = models.JSONField(default=dict, blank=True)

    is_filterable = models.BooleanField(default=False)
    is_searchable = models.BooleanField(default=False)
    is_visible_on_product = models.BooleanField(default=True)
    is_required = models.BooleanField(default=False, help_text="Global default; categories may override.")

    sort_order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["sort_order", "name"]
        indexes = [
            models.Index(fields=["is_filterable", "is_active"], name="catalog_att_is_filt_2d9e14_idx"),
            models.Index(fields=["type"], name="catalog_att_type_5f0a77_idx"),
            models.Index(fields=["sort_order"], name="catalog_att_sort_or_c81b3e_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.type})"

    def save(self, *args, **kwargs):
        # slug always follows the name
        self.slug = simple_slug(self.name)[:120]
        super().save(*args, **kwargs)

    @property
    def uses_options(self) -> bool:
        return self.type in self.OPTION_TYPES

    def find_option(self, option_id: str) -> dict | None:
        for opt in self.options or []:
            if str(opt.get("id")) == str(option_id):
                return opt
        return None

    def as_dict(self) -> dict:
        return {
            "id": self.pk,
            "name": self.name,
            "slug": self.slug,
            "type": self.type,
            "description": self.description,
            "options": sorted(self.options or [], key=lambda o: o.get("sort_order", 0)),
            "validation": self.validation or {},
            "is_filterable": self.is_filterable,
            "is_searchable": self.is_searchable,
            "is_visible_on_product": self.is_visible_on_product,
            "is_required": self.is_required,
            "sort_order": self.sort_order,
            "is_active": self.is_active,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class CategoryAttribute(models.Model):
    category = models.ForeignKey(Category, on_delete=models.CASCADE, related_name="attribute_links")
    attribute = models.ForeignKey(Attribute, on_delete=models.CASCADE, related_name="category_links")

    is_required = models.BooleanField(default=False)

    # Rows created by propagation point at the category they came from.
    is_inherited = models.BooleanField(default=False)
    inherited_from = models.ForeignKey(
        Category,
        null=True,
        blank=True,
        on_delete=models.CASCADE,
        related_name="propagated_attribute_links",
    )

    sort_order = models.IntegerField(default=0)

    # {"is_required", "default_value", "options": [{"value", "label"}]}
    overrides = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["sort_order", "id"]
        constraints = [
            models.UniqueConstraint(fields=["category", "attribute"], name="uniq_category_attribute"),
        ]
        indexes = [
            models.Index(fields=["category", "sort_order"], name="catalog_cat_categor_91d2f3_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.category} :: {self.attribute.name}"

    def as_dict(self) -> dict:
        return {
            "id": self.pk,
            "category_id": self.category_id,
            "attribute": self.attribute.as_dict(),
            "is_required": self.is_required,
            "is_inherited": self.is_inherited,
            "inherited_from": self.inherited_from_id,
            "sort_order": self.sort_order,
            "overrides": self.overrides or {},
        }
