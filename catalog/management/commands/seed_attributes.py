from __future__ import annotations

from django.core.management.base import BaseCommand
from django.db import transaction

from catalog.models import Attribute, Category, CategoryAttribute
from catalog.services import normalize_options, propagate_to_children


ATTRIBUTES = [
    {
        "name": "Color",
        "type": Attribute.Type.COLOR,
        "description": "Product color",
        "is_filterable": True,
        "options": [
            {"value": "red", "label": "Red", "color_hex": "#FF0000"},
            {"value": "blue", "label": "Blue", "color_hex": "#0000FF"},
            {"value": "green", "label": "Green", "color_hex": "#00FF00"},
            {"value": "black", "label": "Black", "color_hex": "#000000"},
            {"value": "white", "label": "White", "color_hex": "#FFFFFF"},
        ],
    },
    {
        "name": "Size",
        "type": Attribute.Type.SELECT,
        "description": "Product size",
        "is_filterable": True,
        "options": [{"value": v.lower(), "label": v} for v in ("XS", "S", "M", "L", "XL", "XXL")],
    },
    {
        "name": "Material",
        "type": Attribute.Type.SELECT,
        "description": "Product material",
        "is_filterable": True,
        "options": [{"value": v.lower(), "label": v} for v in ("Cotton", "Polyester", "Leather", "Wool", "Silk")],
    },
    {
        "name": "Brand",
        "type": Attribute.Type.TEXT,
        "description": "Product brand name",
        "is_filterable": True,
        "is_searchable": True,
    },
    {
        "name": "Weight (kg)",
        "type": Attribute.Type.NUMBER,
        "description": "Product weight in kilograms",
        "validation": {"min": 0, "max": 1000},
    },
    {
        "name": "Warranty",
        "type": Attribute.Type.SELECT,
        "description": "Warranty period",
        "is_filterable": True,
        "options": [
            {"value": "none", "label": "No Warranty"},
            {"value": "6months", "label": "6 Months"},
            {"value": "1year", "label": "1 Year"},
            {"value": "2years", "label": "2 Years"},
        ],
    },
]

# Attributes assigned to every root category (children inherit).
ROOT_ATTRIBUTES = ("Color", "Brand")


class Command(BaseCommand):
    help = "Seed common product attributes (idempotent) and assign them to root categories."

    def add_arguments(self, parser):
        parser.add_argument("--dry-run", action="store_true", help="Do not write changes.")
        parser.add_argument(
            "--no-assign",
            action="store_true",
            help="Only create attributes; skip category assignment.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        dry_run = bool(options["dry_run"])
        created = 0
        assigned = 0

        by_name: dict[str, Attribute] = {}
        for sort, data in enumerate(ATTRIBUTES):
            existing = Attribute.objects.filter(name=data["name"]).first()
            if existing:
                by_name[data["name"]] = existing
                self.stdout.write(f"exists: {data['name']}")
                continue
            if dry_run:
                self.stdout.write(f"[DRY] create {data['name']} ({data['type']})")
                continue

            fields = {k: v for k, v in data.items() if k != "options"}
            attr = Attribute(**fields, sort_order=sort * 10)
            attr.options = normalize_options(data.get("options"))
            attr.save()
            by_name[attr.name] = attr
            created += 1

        if not options["no_assign"] and not dry_run:
            for root in Category.objects.filter(parent__isnull=True):
                for name in ROOT_ATTRIBUTES:
                    attr = by_name.get(name)
                    if attr is None:
                        continue
                    _, was_created = CategoryAttribute.objects.get_or_create(category=root, attribute=attr)
                    if was_created:
                        assigned += 1
                    assigned += propagate_to_children(root, attr)

        self.stdout.write(self.style.SUCCESS(f"Done. created={created} assigned={assigned} dry_run={dry_run}"))
