# seo/models.py
from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone


def strip_trailing_slashes(url: str) -> str:
    url = (url or "").strip().rstrip("/")
    return url or "/"


class UrlRedirect(models.Model):
    """
    old_url -> new_url mapping served by seo.middleware.RedirectMiddleware.

    old_url is stored lowercased without trailing slashes; new_url keeps its
    case (query strings and external hosts are allowed there).
    """

    class RedirectType(models.IntegerChoices):
        MOVED_PERMANENTLY = 301, "301 Moved Permanently"
        FOUND = 302, "302 Found"
        TEMPORARY = 307, "307 Temporary Redirect"
        PERMANENT = 308, "308 Permanent Redirect"

    class Reason(models.TextChoices):
        SLUG_CHANGE = "slug_change", "Slug change"
        URL_RESTRUCTURE = "url_restructure", "URL restructure"
        MANUAL = "manual", "Manual"
        SEO_OPTIMIZATION = "seo_optimization", "SEO optimization"
        DELETED_CONTENT = "deleted_content", "Deleted content"

    class EntityType(models.TextChoices):
        PRODUCT = "product", "Product"
        CATEGORY = "category", "Category"
        VENDOR = "vendor", "Vendor"
        PAGE = "page", "Page"

    old_url = models.CharField(max_length=500)
    new_url = models.CharField(max_length=500)
    redirect_type = models.PositiveSmallIntegerField(
        choices=RedirectType.choices,
        default=RedirectType.MOVED_PERMANENTLY,
    )

    hit_count = models.PositiveIntegerField(default=0)
    last_accessed_at = models.DateTimeField(null=True, blank=True)

    reason = models.CharField(max_length=32, choices=Reason.choices, default=Reason.MANUAL)
    description = models.CharField(max_length=500, blank=True)

    entity_type = models.CharField(max_length=16, choices=EntityType.choices, blank=True, default="")
    entity_id = models.PositiveBigIntegerField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="url_redirects",
    )
    is_active = models.BooleanField(default=True)
    expires_at = models.DateTimeField(null=True, blank=True)

    # [{"url", "count", "last_seen"}], highest counts kept
    referrers = models.JSONField(default=list, blank=True)
    # [{"date": "YYYY-MM-DD", "count"}], oldest first
    daily_hits = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["old_url"],
                condition=Q(is_active=True),
                name="uniq_active_redirect_old_url",
            ),
        ]
        indexes = [
            models.Index(fields=["old_url", "is_active"], name="seo_urlredi_old_url_4c7a12_idx"),
            models.Index(fields=["entity_type", "entity_id"], name="seo_urlredi_entity__b90e35_idx"),
            models.Index(fields=["-hit_count"], name="seo_urlredi_hit_cou_1d6f80_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.old_url} -> {self.new_url} ({self.redirect_type})"

    def save(self, *args, **kwargs):
        self.old_url = strip_trailing_slashes(self.old_url).lower()
        self.new_url = strip_trailing_slashes(self.new_url)
        super().save(*args, **kwargs)

    @property
    def is_expired(self) -> bool:
        return bool(self.expires_at and self.expires_at <= timezone.now())

    def as_dict(self, *, analytics: bool = False) -> dict:
        data = {
            "id": self.pk,
            "old_url": self.old_url,
            "new_url": self.new_url,
            "redirect_type": self.redirect_type,
            "hit_count": self.hit_count,
            "last_accessed_at": self.last_accessed_at,
            "reason": self.reason,
            "description": self.description,
            "entity_type": self.entity_type or None,
            "entity_id": self.entity_id,
            "is_active": self.is_active,
            "expires_at": self.expires_at,
            "created_at": self.created_at,
        }
        if analytics:
            data["referrers"] = self.referrers or []
            data["daily_hits"] = self.daily_hits or []
        return data
