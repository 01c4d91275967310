# FILE: /backend/apps/catalog/apps.py
from django.apps import AppConfig


class CatalogConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'backend.apps.catalog'
    label = 'catalog'
    verbose_name = 'Package Catalog'
