"""Central bank news ingestion package bootstrap."""

from .celery_app import create_celery_app, get_celery_app  # noqa: F401
from .settings import IngestSettings, get_settings, reset_settings_cache  # noqa: F401

__all__ = [
    "IngestSettings",
    "create_celery_app",
    "get_celery_app",
    "get_settings",
    "reset_settings_cache",
]
