# core/logging_filters.py
from __future__ import annotations

import logging

from .logging_context import current


class RequestContextFilter(logging.Filter):
    """Stamp request id / user / method / path onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = current()
        record.request_id = ctx.request_id if ctx else "-"
        record.user_id = ctx.user_id if ctx else None
        record.method = ctx.method if ctx else ""
        record.path = ctx.path if ctx else ""
        return True
