from datetime import timedelta
from decimal import Decimal
from unittest import mock

from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from backend.apps.payments.models import Transaction
from backend.core.dates import month_bounds
from tests.factories import (
    AdminFactory,
    MembershipFactory,
    SubscriptionPackageFactory,
    TransactionFactory,
    UserFactory,
)

from ..services import admin_dashboard, member_dashboard, monthly_revenue

DASHBOARD_URL = '/dashboard/'


def set_created_at(obj, when):
    type(obj).objects.filter(pk=obj.pk).update(created_at=when)


class AdminAggregatesTests(TestCase):

    def test_counts(self):
        AdminFactory()
        UserFactory.create_batch(3)
        SubscriptionPackageFactory.create_batch(2)
        now = timezone.now()
        MembershipFactory(expires_at=now + timedelta(days=10))
        MembershipFactory(expires_at=now - timedelta(days=1))
        MembershipFactory(status='cancelled', expires_at=now + timedelta(days=10))

        stats = admin_dashboard(now)

        # 3 explicit members plus the 3 owners created by MembershipFactory
        self.assertEqual(stats.total_members, 6)
        self.assertEqual(stats.active_memberships, 1)
        # 2 explicit packages plus one per membership
        self.assertEqual(stats.total_packages, 5)

    def test_monthly_revenue_uses_calendar_month(self):
        now = timezone.now()
        start, end = month_bounds(timezone.localtime(now))
        this_month = TransactionFactory(amount=Decimal('100'), status=Transaction.Status.PAID)
        also_this_month = TransactionFactory(amount=Decimal('50'), status=Transaction.Status.PAID)
        last_month = TransactionFactory(amount=Decimal('1000'), status=Transaction.Status.PAID)
        TransactionFactory(amount=Decimal('7'), status=Transaction.Status.PENDING)
        TransactionFactory(amount=Decimal('9'), status=Transaction.Status.FAILED)

        set_created_at(this_month, start)
        set_created_at(also_this_month, end - timedelta(microseconds=1))
        set_created_at(last_month, start - timedelta(microseconds=1))

        self.assertEqual(monthly_revenue(now), Decimal('150'))

    def test_monthly_revenue_ignores_same_month_last_year(self):
        now = timezone.now()
        txn = TransactionFactory(amount=Decimal('500'), status=Transaction.Status.PAID)
        set_created_at(txn, now - timedelta(days=366))
        self.assertEqual(monthly_revenue(now), Decimal('0'))

    def test_recent_rows_are_limited_and_newest_first(self):
        base = timezone.now() - timedelta(hours=1)
        transactions = TransactionFactory.create_batch(7)
        for i, txn in enumerate(transactions):
            set_created_at(txn, base + timedelta(minutes=i))
        MembershipFactory.create_batch(6)

        stats = admin_dashboard()

        self.assertEqual(len(stats.recent_transactions), 5)
        self.assertEqual(len(stats.recent_memberships), 5)
        self.assertEqual(
            [t.pk for t in stats.recent_transactions],
            [t.pk for t in reversed(transactions)][:5],
        )

    @override_settings(DASHBOARD_RECENT_LIMIT=2)
    def test_recent_limit_setting(self):
        TransactionFactory.create_batch(3)
        self.assertEqual(len(admin_dashboard().recent_transactions), 2)


class MemberAggregatesTests(TestCase):

    def setUp(self):
        self.member = UserFactory()

    def test_current_membership_is_latest_started_even_if_expired(self):
        now = timezone.now()
        MembershipFactory(user=self.member, started_at=now - timedelta(days=90),
                          expires_at=now + timedelta(days=30))
        latest = MembershipFactory(user=self.member, started_at=now - timedelta(days=40),
                                   expires_at=now - timedelta(days=10))

        board = member_dashboard(self.member)

        self.assertEqual(board.current_membership, latest)

    def test_no_membership(self):
        self.assertIsNone(member_dashboard(self.member).current_membership)

    def test_history_is_own_and_limited(self):
        MembershipFactory.create_batch(6, user=self.member)
        TransactionFactory.create_batch(6, user=self.member)
        MembershipFactory()
        TransactionFactory()

        board = member_dashboard(self.member)

        self.assertEqual(len(board.membership_history), 5)
        self.assertEqual(len(board.transaction_history), 5)
        self.assertTrue(all(m.user_id == self.member.pk for m in board.membership_history))
        self.assertTrue(all(t.user_id == self.member.pk for t in board.transaction_history))

    def test_available_packages_are_active_only(self):
        active = SubscriptionPackageFactory(is_active=True)
        SubscriptionPackageFactory(is_active=False)
        self.assertEqual(member_dashboard(self.member).available_packages, [active])


class DashboardViewTests(APITestCase):

    def test_admin_dashboard(self):
        admin = AdminFactory()
        TransactionFactory(status=Transaction.Status.PAID, amount=Decimal('99000'))
        self.client.force_authenticate(user=admin)

        response = self.client.get(DASHBOARD_URL)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['role'], 'admin')
        self.assertEqual(Decimal(response.data['stats']['monthly_revenue']), Decimal('99000'))
        self.assertEqual(len(response.data['recent_transactions']), 1)
        self.assertIn('user', response.data['recent_transactions'][0])

    def test_member_dashboard(self):
        member = UserFactory()
        membership = MembershipFactory(user=member)
        self.client.force_authenticate(user=member)

        response = self.client.get(DASHBOARD_URL)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['role'], 'member')
        self.assertEqual(response.data['current_membership']['id'], str(membership.pk))
        self.assertNotIn('stats', response.data)

    def test_dashboard_does_not_write(self):
        member = UserFactory()
        MembershipFactory(user=member, expires_at=timezone.now() - timedelta(days=1))
        self.client.force_authenticate(user=member)
        with mock.patch('django.db.models.query.QuerySet.update') as update:
            self.client.get(DASHBOARD_URL)
        update.assert_not_called()

    def test_requires_authentication(self):
        response = self.client.get(DASHBOARD_URL)
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))
