from django.apps import AppConfig


class MembershipsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'backend.apps.memberships'
    label = 'memberships'
    verbose_name = 'Memberships'
