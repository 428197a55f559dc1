from __future__ import annotations

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Category",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120)),
                ("slug", models.SlugField(max_length=140)),
                ("description", models.TextField(blank=True)),
                ("is_active", models.BooleanField(default=True)),
                ("sort_order", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("parent", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="children", to="catalog.category")),
            ],
            options={
                "verbose_name_plural": "Categories",
                "ordering": ["parent_id", "sort_order", "name"],
                "indexes": [
                    models.Index(fields=["parent", "is_active", "sort_order"], name="catalog_cat_parent_4a1e2d_idx"),
                    models.Index(fields=["slug"], name="catalog_cat_slug_7b3c90_idx"),
                ],
                "unique_together": {("parent", "slug")},
            },
        ),
        migrations.CreateModel(
            name="Attribute",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("slug", models.SlugField(max_length=120, unique=True)),
                ("type", models.CharField(choices=[("text", "Text"), ("number", "Number"), ("select", "Select"), ("multi_select", "Multi select"), ("boolean", "Boolean"), ("color", "Color"), ("date", "Date")], max_length=20)),
                ("description", models.CharField(blank=True, max_length=500)),
                ("options", models.JSONField(blank=True, default=list)),
                ("validation", models.JSONField(blank=True, default=dict)),
                ("is_filterable", models.BooleanField(default=False)),
                ("is_searchable", models.BooleanField(default=False)),
                ("is_visible_on_product", models.BooleanField(default=True)),
                ("is_required", models.BooleanField(default=False, help_text="Global default; categories may override.")),
                ("sort_order", models.IntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["sort_order", "name"],
                "indexes": [
                    models.Index(fields=["is_filterable", "is_active"], name="catalog_att_is_filt_2d9e14_idx"),
                    models.Index(fields=["type"], name="catalog_att_type_5f0a77_idx"),
                    models.Index(fields=["sort_order"], name="catalog_att_sort_or_c81b3e_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CategoryAttribute",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("is_required", models.BooleanField(default=False)),
                ("is_inherited", models.BooleanField(default=False)),
                ("sort_order", models.IntegerField(default=0)),
                ("overrides", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("attribute", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="category_links", to="catalog.attribute")),
                ("category", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="attribute_links", to="catalog.category")),
                ("inherited_from", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="propagated_attribute_links", to="catalog.category")),
            ],
            options={
                "ordering": ["sort_order", "id"],
                "indexes": [
                    models.Index(fields=["category", "sort_order"], name="catalog_cat_categor_91d2f3_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("category", "attribute"), name="uniq_category_attribute"),
                ],
            },
        ),
    ]
