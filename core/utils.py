# core/utils.py
from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.conf import settings

CENT = Decimal("0.01")

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")


def get_setting_int(name: str, default: int) -> int:
    try:
        return int(getattr(settings, name, default) or default)
    except (TypeError, ValueError):
        return default


def to_decimal(value, *, field: str = "value") -> Decimal:
    """Parse JSON numbers/strings into Decimal without float noise."""
    from django.core.exceptions import ValidationError

    if isinstance(value, bool) or value is None:
        raise ValidationError({field: "Must be a number."})
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError({field: "Must be a number."})


def round_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def simple_slug(text: str) -> str:
    """lowercase, non-alphanumeric runs -> '-', no leading/trailing dashes."""
    return _SLUG_STRIP.sub("-", (text or "").lower()).strip("-")
