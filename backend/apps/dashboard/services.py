"""
Dashboard aggregator: read-only composition over packages, transactions
and memberships. Nothing here writes.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.db.models import Sum
from django.utils import timezone

from backend.apps.accounts.models import User
from backend.apps.catalog.models import SubscriptionPackage
from backend.apps.memberships.models import Membership
from backend.apps.payments.models import Transaction
from backend.core.dates import month_bounds


def recent_limit() -> int:
    return getattr(settings, 'DASHBOARD_RECENT_LIMIT', 5)


@dataclass
class AdminDashboard:
    total_members: int
    active_memberships: int
    total_packages: int
    monthly_revenue: Decimal
    recent_transactions: list = field(default_factory=list)
    recent_memberships: list = field(default_factory=list)


@dataclass
class MemberDashboard:
    current_membership: Optional[Membership]
    membership_history: list = field(default_factory=list)
    transaction_history: list = field(default_factory=list)
    available_packages: list = field(default_factory=list)


def monthly_revenue(now=None) -> Decimal:
    """Sum of paid transactions created in the current calendar month."""
    now = timezone.localtime(now or timezone.now())
    start, end = month_bounds(now)
    total = (
        Transaction.objects
        .filter(status=Transaction.Status.PAID, created_at__gte=start, created_at__lt=end)
        .aggregate(total=Sum('amount'))['total']
    )
    return total or Decimal('0')


def admin_dashboard(now=None) -> AdminDashboard:
    now = now or timezone.now()
    limit = recent_limit()
    return AdminDashboard(
        total_members=User.objects.members().count(),
        active_memberships=Membership.objects.active(now).count(),
        total_packages=SubscriptionPackage.objects.count(),
        monthly_revenue=monthly_revenue(now),
        recent_transactions=list(
            Transaction.objects.select_related('user', 'package').order_by('-created_at')[:limit]
        ),
        recent_memberships=list(
            Membership.objects.select_related('user', 'package').order_by('-created_at')[:limit]
        ),
    )


def member_dashboard(user) -> MemberDashboard:
    limit = recent_limit()
    return MemberDashboard(
        current_membership=user.current_membership(),
        membership_history=list(
            user.memberships.select_related('package').order_by('-created_at')[:limit]
        ),
        transaction_history=list(
            user.transactions.select_related('package').order_by('-created_at')[:limit]
        ),
        available_packages=list(SubscriptionPackage.objects.active().order_by('price')),
    )
