# backend/ops_core/visits/apps.py
from django.apps import AppConfig


class VisitsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "ops_core.visits"
    label = "visits"
