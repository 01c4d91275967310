from rest_framework import serializers

from backend.apps.catalog.serializers import SubscriptionPackageSerializer
from backend.apps.memberships.serializers import MembershipSerializer
from backend.apps.payments.serializers import TransactionSerializer

MONEY_MAX_DIGITS = 18
MONEY_DECIMAL_PLACES = 2


class AdminStatsSerializer(serializers.Serializer):
    total_members = serializers.IntegerField()
    active_memberships = serializers.IntegerField()
    total_packages = serializers.IntegerField()
    monthly_revenue = serializers.DecimalField(
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=MONEY_DECIMAL_PLACES,
        help_text="Paid transactions created this calendar month"
    )


class AdminDashboardSerializer(serializers.Serializer):
    stats = serializers.SerializerMethodField()
    recent_transactions = TransactionSerializer(many=True)
    recent_memberships = MembershipSerializer(many=True)

    def get_stats(self, obj):
        return AdminStatsSerializer(obj).data


class MemberDashboardSerializer(serializers.Serializer):
    current_membership = MembershipSerializer(allow_null=True)
    membership_history = MembershipSerializer(many=True)
    transaction_history = TransactionSerializer(many=True)
    available_packages = SubscriptionPackageSerializer(many=True)
