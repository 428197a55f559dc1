from django.apps import AppConfig


class BulkopsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "bulkops"
    verbose_name = "Bulk operations"
