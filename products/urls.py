from django.urls import path

from . import views

app_name = "products"

urlpatterns = [
    path("", views.product_collection, name="list"),
    path("<int:product_id>/", views.product_detail, name="detail"),
    path("<int:product_id>/variants/", views.variant_collection, name="variants"),
    path("<int:product_id>/variants/inventory/", views.variant_inventory, name="variant_inventory"),
    path("<int:product_id>/variants/find/", views.variant_find, name="variant_find"),
    path("<int:product_id>/variants/bulk/", views.variant_bulk_update, name="variant_bulk_update"),
    path("<int:product_id>/variants/<int:variant_id>/", views.variant_detail, name="variant_detail"),
]
