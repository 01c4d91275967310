from django.urls import path

from .views import health_report

urlpatterns = [
    path('json/', health_report, name='health_check_json'),
]
