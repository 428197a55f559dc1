from django.urls import path

from . import views

app_name = "orders"

urlpatterns = [
    path("", views.my_orders, name="my_orders"),
    path("<uuid:order_id>/", views.order_detail, name="detail"),
    path("<uuid:order_id>/status/", views.order_status, name="status"),
]
