from django.contrib.admin import AdminSite
from django.urls import reverse


class HealthCheckAdminSite(AdminSite):
    site_header = "Subscription Platform Admin"
    site_title = "Subscription Platform"
    index_title = "Dashboard"

    def index(self, request, extra_context=None):
        extra_context = extra_context or {}
        extra_context['health_check_url'] = reverse('health_check_json')
        return super().index(request, extra_context)
