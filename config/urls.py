# config/urls.py

from __future__ import annotations

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

from core import views as core_views

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/health/", core_views.health, name="health"),
    path("api/accounts/", include("accounts.urls")),
    path("api/", include("catalog.urls")),
    # Vendor-scoped product assets: /api/products/<id>/digital-assets/
    path("api/products/<int:product_id>/digital-assets/", include("downloads.urls_vendor")),
    path("api/products/", include("products.urls")),

    path("api/vendors/bulk-operations/", include("bulkops.urls")),

    # Customer delivery: /api/orders/<order>/downloads/<asset>/ and /api/downloads/
    path("api/", include("downloads.urls")),
    path("api/orders/", include("orders.urls")),

    path("api/admin/redirects/", include("seo.urls")),
]

handler400 = "core.views.error_400"
handler403 = "core.views.error_403"
handler404 = "core.views.error_404"
handler500 = "core.views.error_500"

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
