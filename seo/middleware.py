# seo/middleware.py
from __future__ import annotations

import logging
import re

from django.conf import settings
from django.db import DatabaseError
from django.http import HttpResponseRedirect
from django.utils.deprecation import MiddlewareMixin

from . import services

logger = logging.getLogger(__name__)

STATIC_ASSET_RE = re.compile(r"\.(js|css|png|jpe?g|gif|svg|ico|webp|woff2?|ttf|map)$", re.IGNORECASE)
SKIP_PREFIXES = ("/api/", "/admin/")


class RedirectMiddleware(MiddlewareMixin):
    """
    Serve stored UrlRedirects for storefront GETs.

    API, admin and static asset paths are never looked up. Database trouble
    while looking up or counting a hit is logged and the request carries on.
    """

    def _skip(self, path: str) -> bool:
        if path.startswith(SKIP_PREFIXES):
            return True
        for prefix in (getattr(settings, "STATIC_URL", ""), getattr(settings, "MEDIA_URL", "")):
            if prefix and prefix != "/" and path.startswith(prefix):
                return True
        return bool(STATIC_ASSET_RE.search(path))

    def process_request(self, request):
        if request.method != "GET" or self._skip(request.path):
            return None

        try:
            redirect = services.find_redirect(request.path)
        except DatabaseError:
            logger.exception("Redirect lookup failed path=%s", request.path)
            return None

        if redirect is None:
            return None

        try:
            services.record_hit(redirect, request.META.get("HTTP_REFERER") or None)
        except DatabaseError:
            logger.exception("Recording redirect hit failed id=%s", redirect.pk)

        target = redirect.new_url
        query = request.META.get("QUERY_STRING", "")
        if query and "?" not in target:
            target = f"{target}?{query}"

        response = HttpResponseRedirect(target)
        response.status_code = redirect.redirect_type
        return response
