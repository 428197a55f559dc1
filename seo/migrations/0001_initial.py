from __future__ import annotations

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="UrlRedirect",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("old_url", models.CharField(max_length=500)),
                ("new_url", models.CharField(max_length=500)),
                ("redirect_type", models.PositiveSmallIntegerField(choices=[(301, "301 Moved Permanently"), (302, "302 Found"), (307, "307 Temporary Redirect"), (308, "308 Permanent Redirect")], default=301)),
                ("hit_count", models.PositiveIntegerField(default=0)),
                ("last_accessed_at", models.DateTimeField(blank=True, null=True)),
                ("reason", models.CharField(choices=[("slug_change", "Slug change"), ("url_restructure", "URL restructure"), ("manual", "Manual"), ("seo_optimization", "SEO optimization"), ("deleted_content", "Deleted content")], default="manual", max_length=32)),
                ("description", models.CharField(blank=True, max_length=500)),
                ("entity_type", models.CharField(blank=True, choices=[("product", "Product"), ("category", "Category"), ("vendor", "Vendor"), ("page", "Page")], default="", max_length=16)),
                ("entity_id", models.PositiveBigIntegerField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("expires_at", models.DateTimeField(blank=True, null=True)),
                ("referrers", models.JSONField(blank=True, default=list)),
                ("daily_hits", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="url_redirects", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["old_url", "is_active"], name="seo_urlredi_old_url_4c7a12_idx"),
                    models.Index(fields=["entity_type", "entity_id"], name="seo_urlredi_entity__b90e35_idx"),
                    models.Index(fields=["-hit_count"], name="seo_urlredi_hit_cou_1d6f80_idx"),
                ],
            },
        ),
        migrations.AddConstraint(
            model_name="urlredirect",
            constraint=models.UniqueConstraint(condition=models.Q(("is_active", True)), fields=("old_url",), name="uniq_active_redirect_old_url"),
        ),
    ]
