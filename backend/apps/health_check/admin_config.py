from django.contrib.admin.apps import AdminConfig


class CustomAdminConfig(AdminConfig):
    """Django admin using the site that links to the dependency report."""
    default_site = 'backend.apps.health_check.admin.HealthCheckAdminSite'
