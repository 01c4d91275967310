"""
Package catalog URLs.
"""
from django.urls import path, include
from rest_framework.routers import SimpleRouter

from . import views

router = SimpleRouter()
router.register(r'', views.SubscriptionPackageViewSet, basename='subscription-package')

urlpatterns = [
    path('', include(router.urls)),
]
