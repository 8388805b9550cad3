# config/settings/local.py
from .base import *  # noqa

DEBUG = os.getenv("DJANGO_DEBUG", "1") == "1"  # noqa: F405

LOGGING["loggers"]["ops_core"]["level"] = os.getenv("LOG_LEVEL", "DEBUG").upper()  # noqa: F405
