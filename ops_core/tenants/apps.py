# backend/ops_core/tenants/apps.py
from django.apps import AppConfig


class TenantsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "ops_core.tenants"
    label = "tenants"
