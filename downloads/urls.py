# downloads/urls.py
from __future__ import annotations

from django.urls import path

from . import views

app_name = "downloads"

urlpatterns = [
    path("orders/<uuid:order_id>/downloads/<int:asset_id>/", views.issue_download, name="issue"),
    path("downloads/", views.my_downloads, name="mine"),
    path("downloads/<int:log_id>/refresh/", views.refresh_download, name="refresh"),
    path("downloads/<uuid:token>/", views.token_download, name="file"),
]
