# core/storage_backends.py
from __future__ import annotations

import os

from django.conf import settings
from django.core.files.storage import FileSystemStorage
from storages.backends.s3boto3 import S3Boto3Storage


class DownloadsStorage(S3Boto3Storage):
    """
    Private downloads bucket for paid digital assets.

    Always uses signed URLs; expiry comes from MARKET_SIGNED_URL_SECONDS.
    """
    bucket_name = os.getenv("AWS_S3_DOWNLOADS_BUCKET", "")
    default_acl = None
    file_overwrite = False
    location = "downloads"
    querystring_auth = True
    custom_domain = None  # ensures signed S3 URLs


def s3_enabled() -> bool:
    return bool(getattr(settings, "USE_S3", False))


def get_downloads_storage():
    """
    Storage for digital assets.
    - USE_S3=True: DownloadsStorage (S3 private bucket)
    - else: local filesystem under MEDIA_ROOT, served only through token downloads
    """
    if s3_enabled():
        return DownloadsStorage()
    return FileSystemStorage()


def storage_provider_name() -> str:
    return "s3" if s3_enabled() else "local"


def signed_url(name: str, *, expire_seconds: int) -> str:
    """Time-limited URL straight from the provider (S3 only)."""
    return DownloadsStorage().url(name, expire=expire_seconds)
