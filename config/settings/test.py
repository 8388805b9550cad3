# config/settings/test.py
from .base import *  # noqa

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

VISITS_ALLOW_PAST_PLANNED_DATE = False

LOGGING["loggers"]["ops_core"]["level"] = "WARNING"  # noqa: F405
