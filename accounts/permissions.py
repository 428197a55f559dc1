# accounts/permissions.py
from __future__ import annotations


def _get_profile(user):
    return getattr(user, "profile", None)


def is_admin_user(user) -> bool:
    if not user or not user.is_authenticated:
        return False
    if getattr(user, "is_superuser", False) or getattr(user, "is_staff", False):
        return True
    return bool(getattr(_get_profile(user), "is_admin", False))


def is_vendor_user(user) -> bool:
    if not user or not user.is_authenticated:
        return False
    if is_admin_user(user):
        return True
    return bool(getattr(_get_profile(user), "is_vendor", False))


def owns_product(user, product) -> bool:
    return bool(user and user.is_authenticated and product.vendor_id == user.pk)
