from django.apps import AppConfig


class HealthCheckConfig(AppConfig):
    """Liveness probe and dependency report."""
    name = 'backend.apps.health_check'
    label = 'health_check'
    verbose_name = 'System Health'
