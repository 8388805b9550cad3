# backend/ops_core/customers/apps.py
from django.apps import AppConfig


class CustomersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "ops_core.customers"
    label = "customers"
