# seo/services.py

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Iterable, Optional

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from core.utils import get_setting_int

from .models import UrlRedirect, strip_trailing_slashes

logger = logging.getLogger(__name__)

MAX_CHAIN_DEPTH = 5


def normalize_old_url(url: str) -> str:
    return strip_trailing_slashes(url).lower()


def _live(qs=None):
    qs = qs if qs is not None else UrlRedirect.objects.all()
    now = timezone.now()
    return qs.filter(is_active=True).filter(Q(expires_at__isnull=True) | Q(expires_at__gt=now))


def find_redirect(url: str) -> Optional[UrlRedirect]:
    """Active, unexpired redirect for a request path, if any."""
    return _live().filter(old_url=normalize_old_url(url)).first()


# ============================================================
# Analytics
# ============================================================
def record_hit(redirect: UrlRedirect, referrer: Optional[str] = None) -> UrlRedirect:
    days_keep = get_setting_int("MARKET_REDIRECT_DAILY_HITS_KEEP", 90)
    referrers_keep = get_setting_int("MARKET_REDIRECT_REFERRERS_KEEP", 50)

    with transaction.atomic():
        row = UrlRedirect.objects.select_for_update().get(pk=redirect.pk)
        now = timezone.now()
        today = timezone.localdate().isoformat()

        row.hit_count += 1
        row.last_accessed_at = now

        daily = list(row.daily_hits or [])
        if daily and daily[-1].get("date") == today:
            daily[-1]["count"] = int(daily[-1].get("count") or 0) + 1
        else:
            daily.append({"date": today, "count": 1})
        row.daily_hits = daily[-days_keep:]

        if referrer:
            referrer = referrer[:500]
            refs = list(row.referrers or [])
            for ref in refs:
                if ref.get("url") == referrer:
                    ref["count"] = int(ref.get("count") or 0) + 1
                    ref["last_seen"] = now.isoformat()
                    break
            else:
                refs.append({"url": referrer, "count": 1, "last_seen": now.isoformat()})
                if len(refs) > referrers_keep:
                    refs.sort(key=lambda r: r.get("count") or 0, reverse=True)
                    refs = refs[:referrers_keep]
            row.referrers = refs

        row.save(update_fields=["hit_count", "last_accessed_at", "daily_hits", "referrers", "updated_at"])

    redirect.hit_count = row.hit_count
    redirect.last_accessed_at = row.last_accessed_at
    return row


# ============================================================
# Creation
# ============================================================
@transaction.atomic
def create_on_slug_change(
    old_url: str,
    new_url: str,
    *,
    entity_type: str,
    entity_id: Optional[int],
    created_by=None,
) -> UrlRedirect:
    """
    Point old_url at new_url after an entity's slug changed.

    An existing active redirect for old_url is retargeted instead of
    duplicated. A redirect away from new_url is switched off since that
    URL is live content again.
    """
    old_norm = normalize_old_url(old_url)

    UrlRedirect.objects.filter(old_url=normalize_old_url(new_url), is_active=True).update(
        is_active=False,
        updated_at=timezone.now(),
    )

    existing = UrlRedirect.objects.filter(old_url=old_norm, is_active=True).first()
    if existing is not None:
        existing.new_url = new_url
        existing.reason = UrlRedirect.Reason.SLUG_CHANGE
        existing.save()
        return existing

    return UrlRedirect.objects.create(
        old_url=old_norm,
        new_url=new_url,
        redirect_type=UrlRedirect.RedirectType.MOVED_PERMANENTLY,
        reason=UrlRedirect.Reason.SLUG_CHANGE,
        entity_type=entity_type or "",
        entity_id=entity_id,
        created_by=created_by,
    )


def _clean_redirect_type(raw: Any) -> int:
    if raw in (None, ""):
        return UrlRedirect.RedirectType.MOVED_PERMANENTLY
    try:
        value = int(raw)
    except (TypeError, ValueError):
        value = 0
    if value not in UrlRedirect.RedirectType.values:
        raise ValidationError({"redirect_type": "Must be one of: 301, 302, 307, 308"})
    return value


def _clean_expires_at(raw: Any):
    if raw in (None, ""):
        return None
    value = parse_datetime(str(raw))
    if value is None:
        raise ValidationError({"expires_at": "Must be an ISO 8601 datetime."})
    if timezone.is_naive(value):
        value = timezone.make_aware(value)
    return value


def _apply_fields(redirect: UrlRedirect, data: dict, *, partial: bool) -> None:
    if not partial or "old_url" in data or "new_url" in data:
        old_url = str(data.get("old_url", redirect.old_url) or "").strip()
        new_url = str(data.get("new_url", redirect.new_url) or "").strip()
        if not old_url or not new_url:
            raise ValidationError("Old URL and new URL are required")
        if normalize_old_url(old_url) == normalize_old_url(new_url):
            raise ValidationError("Old URL and new URL must be different")
        redirect.old_url = old_url
        redirect.new_url = new_url

    if not partial or "redirect_type" in data:
        redirect.redirect_type = _clean_redirect_type(data.get("redirect_type"))
    if not partial or "reason" in data:
        reason = data.get("reason") or UrlRedirect.Reason.MANUAL
        if reason not in UrlRedirect.Reason.values:
            raise ValidationError({"reason": f"Must be one of: {', '.join(UrlRedirect.Reason.values)}"})
        redirect.reason = reason
    if "description" in data:
        redirect.description = str(data.get("description") or "")[:500]
    if "is_active" in data:
        redirect.is_active = bool(data.get("is_active"))
    if "expires_at" in data:
        redirect.expires_at = _clean_expires_at(data.get("expires_at"))


def _save_unique(redirect: UrlRedirect) -> UrlRedirect:
    try:
        with transaction.atomic():
            redirect.save()
    except IntegrityError:
        raise ValidationError("A redirect for this URL already exists")
    return redirect


def create_redirect(data: dict, *, created_by=None) -> UrlRedirect:
    redirect = UrlRedirect(created_by=created_by)
    _apply_fields(redirect, data, partial=False)
    return _save_unique(redirect)


def update_redirect(redirect: UrlRedirect, data: dict) -> UrlRedirect:
    _apply_fields(redirect, data, partial=True)
    return _save_unique(redirect)


def bulk_create(items: Iterable[Any], *, created_by=None) -> dict:
    """
    Import many redirects; bad or duplicate rows are reported, not fatal.
    """
    created = 0
    errors: list[dict] = []
    for index, item in enumerate(items or []):
        if not isinstance(item, dict):
            errors.append({"index": index, "message": "Each redirect must be an object"})
            continue
        try:
            create_redirect(
                {
                    "old_url": item.get("old_url"),
                    "new_url": item.get("new_url"),
                    "redirect_type": item.get("redirect_type"),
                    "reason": item.get("reason"),
                    "description": item.get("description", ""),
                },
                created_by=created_by,
            )
            created += 1
        except ValidationError as exc:
            errors.append({"index": index, "old_url": item.get("old_url"), "message": "; ".join(exc.messages)})

    logger.info("Redirect import created=%s failed=%s", created, len(errors))
    return {"created": created, "failed": len(errors), "errors": errors}


# ============================================================
# Chains
# ============================================================
def resolve_chain(url: str, max_depth: int = MAX_CHAIN_DEPTH) -> dict:
    """Follow redirects from url; reports the final URL and whether it loops."""
    visited: set[str] = set()
    current = url
    depth = 0

    while depth < max_depth:
        key = normalize_old_url(current)
        if key in visited:
            return {"url": current, "is_circular": True, "depth": depth}
        visited.add(key)

        redirect = find_redirect(current)
        if redirect is None:
            return {"url": current, "is_circular": False, "depth": depth}

        current = redirect.new_url
        depth += 1

    return {"url": current, "is_circular": False, "depth": depth}


def fix_chains() -> int:
    """Point every redirect that starts a chain straight at the chain's end."""
    fixed = 0
    for redirect in _live().order_by("id"):
        resolved = resolve_chain(redirect.old_url)
        if resolved["depth"] > 1 and not resolved["is_circular"]:
            redirect.new_url = resolved["url"]
            redirect.save(update_fields=["new_url", "updated_at"])
            fixed += 1
    if fixed:
        logger.info("Fixed %s redirect chain(s)", fixed)
    return fixed


# ============================================================
# Reporting / housekeeping
# ============================================================
def _brief(redirect: UrlRedirect) -> dict:
    return {
        "id": redirect.pk,
        "old_url": redirect.old_url,
        "new_url": redirect.new_url,
        "hit_count": redirect.hit_count,
        "last_accessed_at": redirect.last_accessed_at,
    }


def get_stats() -> dict:
    overview = UrlRedirect.objects.aggregate(
        total=Count("id"),
        active=Count("id", filter=Q(is_active=True)),
        total_hits=Sum("hit_count"),
    )
    by_type = list(
        UrlRedirect.objects.values("redirect_type").annotate(count=Count("id")).order_by("redirect_type")
    )
    by_reason = list(UrlRedirect.objects.values("reason").annotate(count=Count("id")).order_by("reason"))
    top = UrlRedirect.objects.order_by("-hit_count", "id")[:10]
    recent = UrlRedirect.objects.filter(last_accessed_at__isnull=False).order_by("-last_accessed_at")[:10]

    return {
        "total": overview["total"] or 0,
        "active": overview["active"] or 0,
        "total_hits": overview["total_hits"] or 0,
        "by_type": by_type,
        "by_reason": by_reason,
        "top_redirects": [_brief(r) for r in top],
        "recently_accessed": [_brief(r) for r in recent],
    }


def cleanup(
    *,
    delete_inactive: bool = False,
    delete_unused: bool = False,
    unused_days: int = 365,
    delete_expired: bool = True,
) -> int:
    deleted = 0
    now = timezone.now()

    if delete_expired:
        deleted += UrlRedirect.objects.filter(expires_at__lt=now).delete()[0]

    if delete_inactive:
        deleted += UrlRedirect.objects.filter(is_active=False).delete()[0]

    if delete_unused:
        cutoff = now - timedelta(days=unused_days)
        stale = Q(last_accessed_at__lt=cutoff) | Q(last_accessed_at__isnull=True, created_at__lt=cutoff)
        deleted += UrlRedirect.objects.filter(stale, hit_count__lt=10).delete()[0]

    logger.info("Redirect cleanup removed %s row(s)", deleted)
    return deleted


def search_redirects(*, q: str = "", is_active: Optional[bool] = None):
    qs = UrlRedirect.objects.all()
    if q:
        qs = qs.filter(Q(old_url__icontains=q) | Q(new_url__icontains=q))
    if is_active is not None:
        qs = qs.filter(is_active=is_active)
    return qs.order_by("-created_at")
