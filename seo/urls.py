# seo/urls.py
from __future__ import annotations

from django.urls import path

from . import views

app_name = "seo"

urlpatterns = [
    path("", views.redirect_collection, name="redirects"),
    path("stats/", views.redirect_stats, name="stats"),
    path("fix-chains/", views.redirect_fix_chains, name="fix_chains"),
    path("import/", views.redirect_import, name="import"),
    path("<int:redirect_id>/", views.redirect_detail, name="detail"),
]
