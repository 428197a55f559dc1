from django.urls import path
from . import views

app_name = "catalog"

urlpatterns = [
    path("categories/", views.category_list, name="category_list"),
    path("categories/<int:category_id>/attributes/", views.category_attributes, name="category_attributes"),
    path(
        "categories/<int:category_id>/attributes/reorder/",
        views.category_attributes_reorder,
        name="category_attributes_reorder",
    ),
    path(
        "categories/<int:category_id>/attributes/<int:attribute_id>/",
        views.category_attribute_detail,
        name="category_attribute_detail",
    ),
    path("attributes/", views.attribute_collection, name="attribute_collection"),
    path("attributes/filterable/", views.attribute_filterable, name="attribute_filterable"),
    path("attributes/<int:attribute_id>/", views.attribute_detail, name="attribute_detail"),
    path("attributes/<int:attribute_id>/options/", views.attribute_option_add, name="attribute_option_add"),
    path(
        "attributes/<int:attribute_id>/options/<str:option_id>/",
        views.attribute_option_detail,
        name="attribute_option_detail",
    ),
]
