from rest_framework import serializers

from backend.apps.accounts.serializers import UserSerializer
from backend.apps.catalog.serializers import PackageSummarySerializer

from .models import Transaction


class TransactionSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)
    package = PackageSummarySerializer(read_only=True)
    membership_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = Transaction
        fields = [
            'id', 'transaction_id', 'order_id', 'user', 'package', 'membership_id',
            'amount', 'status', 'payment_method', 'paid_at', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class TransactionDetailSerializer(TransactionSerializer):
    """Transaction plus the membership it produced, for the success page."""
    membership = serializers.SerializerMethodField()

    class Meta(TransactionSerializer.Meta):
        fields = TransactionSerializer.Meta.fields + ['membership', 'gateway_response']
        read_only_fields = fields

    def get_membership(self, obj):
        if obj.membership_id is None:
            return None
        from backend.apps.memberships.serializers import MembershipSerializer  # lazy import to avoid circular deps
        return MembershipSerializer(obj.membership, context=self.context).data


class CheckoutRequestSerializer(serializers.Serializer):
    subscription_package_id = serializers.UUIDField(
        error_messages={
            'required': 'Subscription package is required.',
            'invalid': 'The selected subscription package is invalid.',
        },
    )


class CallbackSerializer(serializers.Serializer):
    """Fields of a gateway notification the ledger reads; anything else is kept as payload."""
    order_id = serializers.CharField(max_length=64)
    transaction_status = serializers.CharField(max_length=32)
    fraud_status = serializers.CharField(max_length=32, required=False, allow_blank=True)
    payment_type = serializers.CharField(max_length=32, required=False, allow_blank=True)
    status_code = serializers.CharField(max_length=8, required=False, allow_blank=True)
    gross_amount = serializers.CharField(max_length=32, required=False, allow_blank=True)
    signature_key = serializers.CharField(required=False, allow_blank=True)
