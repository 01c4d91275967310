"""
Membership views. Memberships are listed and read by their owners and
by admins; only admins change or delete them, and nobody creates them here.
"""
import logging

from rest_framework import viewsets
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.apps.accounts.policy import Action, authorize, scope_to_actor
from backend.core.exceptions import Forbidden, ValidationFailed

from .models import Membership
from .serializers import MembershipDetailSerializer, MembershipSerializer, MembershipStatusUpdateSerializer

logger = logging.getLogger(__name__)


class MembershipPagination(PageNumberPagination):
    page_size = 10
    page_size_query_param = 'page_size'
    max_page_size = 100


class MembershipViewSet(viewsets.ModelViewSet):
    serializer_class = MembershipSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = MembershipPagination
    http_method_names = ['get', 'post', 'put', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        # During schema generation, avoid accessing request.user
        if getattr(self, "swagger_fake_view", False):
            return Membership.objects.none()

        queryset = Membership.objects.select_related('user', 'package').order_by('-created_at')
        if self.action == 'list':
            return scope_to_actor(self.request.user, queryset)
        # Detail lookups are unscoped so ownership failures surface as 403, not 404
        return queryset

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return MembershipDetailSerializer
        if self.action in ('update', 'partial_update'):
            return MembershipStatusUpdateSerializer
        return MembershipSerializer

    def create(self, request, *args, **kwargs):
        raise Forbidden('Direct membership creation is not allowed. Memberships are granted through payment.')

    def retrieve(self, request, *args, **kwargs):
        membership = self.get_object()
        authorize(request.user, Action.VIEW_MEMBERSHIP, owner=membership.user_id,
                  message='You can only view your own memberships.')
        serializer = self.get_serializer(membership)
        return Response(serializer.data)

    def update(self, request, *args, **kwargs):
        authorize(request.user, Action.UPDATE_MEMBERSHIP, message='Only admins can update memberships.')
        partial = kwargs.pop('partial', False)
        membership = self.get_object()
        serializer = self.get_serializer(membership, data=request.data, partial=partial)
        if not serializer.is_valid():
            raise ValidationFailed(serializer.errors)
        previous = membership.status
        serializer.save()
        logger.info(
            f"Membership {membership.pk} status {previous} -> {membership.status} by {request.user.email}"
        )
        return Response(MembershipSerializer(membership, context=self.get_serializer_context()).data)

    def destroy(self, request, *args, **kwargs):
        authorize(request.user, Action.DELETE_MEMBERSHIP, message='Only admins can delete memberships.')
        return super().destroy(request, *args, **kwargs)

    def perform_destroy(self, instance):
        membership_id = instance.pk
        instance.delete()
        logger.info(f"Membership {membership_id} deleted by {self.request.user.email}")
