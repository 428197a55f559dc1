# core/views.py
from __future__ import annotations

import logging

from django.db import connection
from django.views.decorators.http import require_GET

from .api import json_error, json_success

logger = logging.getLogger(__name__)


@require_GET
def health(request):
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except Exception:
        logger.exception("Health check: database unreachable")
        return json_error("Database unavailable", status=503)
    return json_success({"status": "ok"})


def error_400(request, exception=None):
    return json_error("Bad request", status=400)


def error_403(request, exception=None):
    return json_error("Forbidden", status=403)


def error_404(request, exception=None):
    return json_error("Not found", status=404)


def error_500(request):
    return json_error("Internal server error", status=500)
