from django.utils import timezone
from rest_framework import serializers

from backend.apps.accounts.serializers import UserSerializer
from backend.apps.catalog.serializers import PackageSummarySerializer

from .models import Membership


class MembershipSerializer(serializers.ModelSerializer):
    """
    `status` is the effective status (expiry applied at read time);
    `stored_status` is what the row holds.
    """
    user = UserSerializer(read_only=True)
    package = PackageSummarySerializer(read_only=True)
    status = serializers.SerializerMethodField()
    stored_status = serializers.CharField(source='status', read_only=True)

    class Meta:
        model = Membership
        fields = [
            'id', 'user', 'package', 'status', 'stored_status',
            'started_at', 'expires_at', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_status(self, obj):
        now = self.context.get('now') or timezone.now()
        return obj.effective_status_at(now)


class MembershipDetailSerializer(MembershipSerializer):
    """Membership plus the transaction that paid for it."""
    source_transaction = serializers.SerializerMethodField()

    class Meta(MembershipSerializer.Meta):
        fields = MembershipSerializer.Meta.fields + ['source_transaction']
        read_only_fields = fields

    def get_source_transaction(self, obj):
        from backend.apps.payments.serializers import TransactionSerializer  # lazy import to avoid circular deps
        txn = getattr(obj, 'source_transaction', None)
        if txn is None:
            return None
        return TransactionSerializer(txn, context=self.context).data


class MembershipStatusUpdateSerializer(serializers.ModelSerializer):
    """Admin status override. Only `status` is writable."""
    status = serializers.CharField()

    class Meta:
        model = Membership
        fields = ['status']

    def validate_status(self, value):
        if value not in Membership.Status.values:
            raise serializers.ValidationError(
                f"Status must be one of: {', '.join(Membership.Status.values)}."
            )
        return value
