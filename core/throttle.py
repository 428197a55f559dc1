# core/throttle.py
from __future__ import annotations

import time
from dataclasses import dataclass
from functools import wraps
from typing import Callable, Iterable, Tuple

from django.conf import settings
from django.core.cache import cache
from django.http import HttpRequest, HttpResponse, JsonResponse


@dataclass(frozen=True)
class ThrottleRule:
    key_prefix: str
    limit: int
    window_seconds: int


def get_client_ip(request: HttpRequest) -> str:
    """
    Best-effort client IP.

    If THROTTLE_TRUST_PROXY_HEADERS=True (prod behind your own proxy),
    we trust X-Forwarded-For / X-Real-IP. Otherwise use REMOTE_ADDR.
    """
    if bool(getattr(settings, "THROTTLE_TRUST_PROXY_HEADERS", False)):
        xff = (request.META.get("HTTP_X_FORWARDED_FOR") or "").strip()
        if xff:
            ip = xff.split(",")[0].strip()
            if ip:
                return ip

        xri = (request.META.get("HTTP_X_REAL_IP") or "").strip()
        if xri:
            return xri

    return (request.META.get("REMOTE_ADDR") or "ip-unknown").strip() or "ip-unknown"


def _client_fingerprint(request: HttpRequest) -> str:
    # authenticated callers are keyed by user so shared NATs don't collide
    if getattr(request.user, "is_authenticated", False):
        return f"user:{request.user.pk}"
    ua = (request.META.get("HTTP_USER_AGENT") or "")[:60]
    return f"{get_client_ip(request)}|{ua}"


def throttle(rule: ThrottleRule, *, methods: Iterable[str] | None = None) -> Callable:
    """
    Fixed-window, cache-based throttle for API endpoints.

    Mutations are throttled by default; pass methods=("GET",) for download endpoints.
    Over the limit -> 429 JSON envelope with Retry-After.
    """
    allowed: Tuple[str, ...] = tuple(m.upper() for m in methods) if methods else ("POST", "PUT", "PATCH", "DELETE")
    window = max(1, rule.window_seconds)

    def decorator(view_func: Callable) -> Callable:
        @wraps(view_func)
        def wrapped(request: HttpRequest, *args, **kwargs) -> HttpResponse:
            if request.method.upper() not in allowed:
                return view_func(request, *args, **kwargs)

            bucket = int(time.time() // window)
            cache_key = f"throttle:{rule.key_prefix}:{bucket}:{_client_fingerprint(request)}"

            current = int(cache.get(cache_key, 0) or 0)
            if current >= rule.limit:
                retry_after = max(1, int(window - (time.time() % window)))
                resp = JsonResponse(
                    {"success": False, "message": "Too many requests. Please try again shortly."},
                    status=429,
                )
                resp["Retry-After"] = str(retry_after)
                return resp

            cache.set(cache_key, current + 1, timeout=window + 5)
            return view_func(request, *args, **kwargs)

        return wrapped

    return decorator
