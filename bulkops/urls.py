from django.urls import path

from . import views

app_name = "bulkops"

urlpatterns = [
    path("", views.operation_collection, name="list"),
    path("<int:operation_id>/", views.operation_detail, name="detail"),
]
