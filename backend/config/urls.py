"""
URL configuration for the Subscription Platform.
"""
from django.contrib import admin
from django.http import HttpResponse
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView

from backend.apps.health_check.views import liveness


def landing_page(request):
    """Public landing page."""
    return HttpResponse(
        '<html><head><title>Subscription Platform</title></head>'
        '<body><h1>Subscription Platform</h1>'
        '<p>Choose a subscription package and start your membership today.</p>'
        '<p><a href="/api/schema/swagger-ui/">API documentation</a></p></body></html>',
        content_type='text/html'
    )


def favicon_view(request):
    """Handle favicon.ico requests gracefully."""
    return HttpResponse(status=204)


urlpatterns = [
    path("", landing_page, name="landing"),
    path("favicon.ico", favicon_view, name="favicon"),
    path("health-check/", liveness, name="health_check"),
    path("health/", include("backend.apps.health_check.urls")),
    path("admin/", admin.site.urls),
    path("auth/", include("backend.apps.accounts.urls")),
    path("dashboard/", include("backend.apps.dashboard.urls")),
    path("memberships/", include("backend.apps.memberships.urls")),
    path("subscription-packages/", include("backend.apps.catalog.urls")),
    path("payment/", include("backend.apps.payments.urls")),
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/schema/swagger-ui/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("api/schema/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
]
