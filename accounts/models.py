from __future__ import annotations

from django.conf import settings
from django.db import models


class Profile(models.Model):
    """Marketplace Profile.

    Extends AUTH_USER_MODEL with marketplace role flags.

    Roles:
      - Customer: default for any registered user
      - Vendor: can list products, run bulk operations, upload digital assets
      - Admin: back-office access (attributes, redirects); superuser/staff imply it

    Profile is created automatically via signal.
    """

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="profile")

    # Vendor-facing identity (public)
    store_name = models.CharField(
        max_length=80,
        blank=True,
        help_text="Optional public store name. If blank, the username is shown.",
    )
    email = models.EmailField(blank=True)

    # Role flags
    is_vendor = models.BooleanField(default=False)
    is_admin = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["is_vendor"], name="accounts_pr_is_vend_5c2f1a_idx"),
            models.Index(fields=["is_admin"], name="accounts_pr_is_admi_8d41b7_idx"),
        ]

    def __str__(self) -> str:
        return f"Profile<{self.user.username}>"

    @property
    def public_store_name(self) -> str:
        return (self.store_name or "").strip() or self.user.username

    def roles(self) -> list[str]:
        roles = ["customer"]
        if self.is_vendor:
            roles.append("vendor")
        if self.is_admin or self.user.is_staff or self.user.is_superuser:
            roles.append("admin")
        return roles
