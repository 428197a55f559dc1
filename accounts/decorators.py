# accounts/decorators.py
from __future__ import annotations

from functools import wraps

from core.api import json_error

from .permissions import is_admin_user, is_vendor_user


def api_login_required(view_func):
    """401 JSON instead of a login redirect."""

    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return json_error("Authentication required", status=401)
        return view_func(request, *args, **kwargs)

    return _wrapped


def vendor_required(view_func):
    """Requires an authenticated vendor (or admin)."""

    @api_login_required
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        if not is_vendor_user(request.user):
            return json_error("Vendor access required", status=403)
        return view_func(request, *args, **kwargs)

    return _wrapped


def admin_required(view_func):
    @api_login_required
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        if not is_admin_user(request.user):
            return json_error("Admin access required", status=403)
        return view_func(request, *args, **kwargs)

    return _wrapped
