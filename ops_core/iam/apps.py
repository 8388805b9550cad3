# backend/ops_core/iam/apps.py
from django.apps import AppConfig


class IamConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "ops_core.iam"
    label = "iam"

    def ready(self):
        # Register the drf-spectacular extension for ScopedJWTAuthentication
        from ops_core.iam import openapi  # noqa: F401
