# FILE: /backend/apps/catalog/filters.py
"""
FilterSet for the package catalog admin listing.
"""
import django_filters

from .models import SubscriptionPackage


class SubscriptionPackageFilter(django_filters.FilterSet):
    min_price = django_filters.NumberFilter(field_name="price", lookup_expr='gte')
    max_price = django_filters.NumberFilter(field_name="price", lookup_expr='lte')
    duration_months = django_filters.NumberFilter(field_name="duration_months")

    class Meta:
        model = SubscriptionPackage
        fields = ['is_active', 'duration_months', 'min_price', 'max_price']
