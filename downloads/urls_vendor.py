# downloads/urls_vendor.py
from __future__ import annotations

from django.urls import path

from . import views_vendor

app_name = "downloads_vendor"

urlpatterns = [
    path("", views_vendor.asset_collection, name="asset_collection"),
    path("<int:asset_id>/", views_vendor.asset_detail, name="asset_detail"),
    path("<int:asset_id>/license-keys/", views_vendor.asset_license_keys, name="asset_license_keys"),
]
