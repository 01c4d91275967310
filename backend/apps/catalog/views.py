# FILE: /backend/apps/catalog/views.py
"""
Package catalog views. Every operation here is restricted to admins.
"""
import logging

from django.db import transaction
from django.db.models import ProtectedError
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, viewsets
from rest_framework.permissions import IsAuthenticated

from backend.apps.accounts.permissions import HasPolicyAction
from backend.apps.accounts.policy import Action
from backend.core.exceptions import PackageInUse

from .filters import SubscriptionPackageFilter
from .models import SubscriptionPackage
from .serializers import SubscriptionPackageDetailSerializer, SubscriptionPackageSerializer

logger = logging.getLogger(__name__)


class SubscriptionPackageViewSet(viewsets.ModelViewSet):
    """
    CRUD for subscription packages (admin only).
    Members see active packages through the dashboard and checkout pages.
    """
    queryset = SubscriptionPackage.objects.all().order_by('-created_at')
    serializer_class = SubscriptionPackageSerializer
    permission_classes = [IsAuthenticated, HasPolicyAction]
    policy_actions = {
        'list': Action.LIST_PACKAGES,
        'retrieve': Action.LIST_PACKAGES,
        'metadata': Action.LIST_PACKAGES,
        'create': Action.CREATE_PACKAGE,
        'update': Action.UPDATE_PACKAGE,
        'partial_update': Action.UPDATE_PACKAGE,
        'destroy': Action.DELETE_PACKAGE,
    }
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = SubscriptionPackageFilter
    search_fields = ['name', 'description']
    ordering_fields = ['name', 'price', 'duration_months', 'created_at']
    ordering = ['-created_at']

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return SubscriptionPackageDetailSerializer
        return SubscriptionPackageSerializer

    def perform_create(self, serializer):
        package = serializer.save()
        logger.info(f"Package {package.id} '{package.name}' created by {self.request.user.email}")

    def perform_update(self, serializer):
        package = serializer.save()
        logger.info(f"Package {package.id} updated by {self.request.user.email}")

    @transaction.atomic
    def perform_destroy(self, instance):
        # The ledger is never deleted, so referenced packages stay
        if instance.is_referenced:
            raise PackageInUse()
        try:
            instance.delete()
        except ProtectedError:
            raise PackageInUse()
        logger.info(f"Package {instance.id} deleted by {self.request.user.email}")
