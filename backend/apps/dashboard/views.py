import logging
import time

from drf_spectacular.utils import extend_schema
from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.apps.accounts.policy import Action, can

from .serializers import AdminDashboardSerializer, MemberDashboardSerializer
from .services import admin_dashboard, member_dashboard

logger = logging.getLogger(__name__)


class DashboardView(APIView):
    """
    Role-dispatched dashboard. Admins get platform totals and the latest
    ledger activity; members get their own membership and payment history
    plus the packages they can buy.
    """
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(responses={200: AdminDashboardSerializer})
    def get(self, request):
        start_time = time.time()
        if can(request.user, Action.VIEW_ADMIN_DASHBOARD):
            role = 'admin'
            data = AdminDashboardSerializer(admin_dashboard(), context={'request': request}).data
        else:
            role = 'member'
            data = MemberDashboardSerializer(member_dashboard(request.user), context={'request': request}).data

        elapsed = (time.time() - start_time) * 1000
        logger.debug(f"{role.capitalize()} dashboard assembled in {elapsed:.2f} ms.")
        return Response({'role': role, **data})
