# downloads/views.py
from __future__ import annotations

from django.http import Http404
from django.views.decorators.http import require_GET, require_POST

from accounts.decorators import api_login_required
from core.api import api_view, json_success, query_int
from core.throttle import ThrottleRule, get_client_ip, throttle

from . import services
from .models import DownloadLog

DOWNLOAD_ISSUE_RULE = ThrottleRule(key_prefix="download-issue", limit=30, window_seconds=60)
DOWNLOAD_FILE_RULE = ThrottleRule(key_prefix="download-file", limit=60, window_seconds=60)


@require_GET
@api_login_required
@throttle(DOWNLOAD_ISSUE_RULE, methods=("GET",))
@api_view
def issue_download(request, order_id, asset_id: int):
    data = services.issue_download(
        order_id=order_id,
        asset_id=asset_id,
        user=request.user,
        ip_address=get_client_ip(request),
        user_agent=request.META.get("HTTP_USER_AGENT", ""),
    )
    return json_success(data)


@require_GET
@api_login_required
@api_view
def my_downloads(request):
    limit = query_int(request.GET.get("limit"), 50, maximum=200)
    rows = []
    for log in services.user_downloads(request.user)[:limit]:
        row = log.as_dict()
        row["order_number"] = log.order.order_number
        row["product_title"] = log.product.title
        row["filename"] = log.asset.original_name or log.asset.filename
        row["formatted_size"] = log.asset.formatted_size
        rows.append(row)
    return json_success(rows)


@require_POST
@api_login_required
@api_view
def refresh_download(request, log_id: int):
    log = DownloadLog.objects.filter(pk=log_id, user=request.user).first()
    if log is None:
        raise Http404("Download not found")
    services.refresh_download_token(log)
    return json_success(
        {
            "download_url": services.token_download_path(log),
            "token_expires_at": log.token_expires_at,
        },
        message="Download link refreshed",
    )


@require_GET
@throttle(DOWNLOAD_FILE_RULE, methods=("GET",))
@api_view
def token_download(request, token):
    return services.serve_token_download(
        token,
        ip_address=get_client_ip(request),
        user_agent=request.META.get("HTTP_USER_AGENT", ""),
    )
