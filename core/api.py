# core/api.py
"""
JSON request/response helpers shared by every API view.

Envelope:
  success -> {"success": true, "data": ..., "message"?: "..."}
  failure -> {"success": false, "message": "..."}
"""
from __future__ import annotations

import json
import logging
from functools import wraps
from typing import Any, Callable

from django.core.exceptions import ObjectDoesNotExist, PermissionDenied, ValidationError
from django.core.serializers.json import DjangoJSONEncoder
from django.http import Http404, HttpRequest, JsonResponse

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised from views/services when a specific HTTP status is required."""

    def __init__(self, message: str, status: int = 400):
        super().__init__(message)
        self.message = message
        self.status = status


def json_success(data: Any = None, *, message: str = "", status: int = 200, **extra) -> JsonResponse:
    payload: dict[str, Any] = {"success": True}
    if data is not None:
        payload["data"] = data
    if message:
        payload["message"] = message
    payload.update(extra)
    return JsonResponse(payload, status=status, encoder=DjangoJSONEncoder)


def json_error(message: str, *, status: int = 400) -> JsonResponse:
    return JsonResponse({"success": False, "message": message}, status=status)


def validation_message(exc: ValidationError) -> str:
    if hasattr(exc, "message_dict"):
        parts = []
        for field, msgs in exc.message_dict.items():
            text = " ".join(str(m) for m in msgs)
            parts.append(text if field == "__all__" else f"{field}: {text}")
        return "; ".join(parts)
    return " ".join(str(m) for m in exc.messages)


def parse_json_body(request: HttpRequest) -> dict:
    if not request.body:
        return {}
    try:
        body = json.loads(request.body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise ApiError("Request body must be valid JSON", status=400)
    if not isinstance(body, dict):
        raise ApiError("Request body must be a JSON object", status=400)
    return body


def query_bool(raw: str | None) -> bool | None:
    if raw is None:
        return None
    return raw.strip().lower() in ("1", "true", "yes", "on")


def query_int(raw: str | None, default: int, *, minimum: int = 1, maximum: int | None = None) -> int:
    try:
        value = int(raw) if raw not in (None, "") else default
    except (TypeError, ValueError):
        value = default
    value = max(minimum, value)
    if maximum is not None:
        value = min(maximum, value)
    return value


def api_view(view_func: Callable) -> Callable:
    """
    Translate service exceptions into the JSON envelope.

    ValidationError -> 400, PermissionDenied -> 403, missing rows -> 404,
    anything else -> 500 (logged).
    """

    @wraps(view_func)
    def _wrapped(request: HttpRequest, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except ApiError as e:
            return json_error(e.message, status=e.status)
        except ValidationError as e:
            return json_error(validation_message(e), status=400)
        except PermissionDenied as e:
            return json_error(str(e) or "Not authorized", status=403)
        except (Http404, ObjectDoesNotExist) as e:
            return json_error(str(e) or "Not found", status=404)
        except Exception:
            logger.exception("Unhandled API error %s %s", request.method, request.path)
            return json_error("Internal server error", status=500)

    return _wrapped
