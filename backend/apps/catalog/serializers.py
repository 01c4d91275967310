# FILE: /backend/apps/catalog/serializers.py
"""
Serializers for the package catalog.
"""
from decimal import Decimal

from rest_framework import serializers

from .models import MAX_DURATION_MONTHS, MIN_DURATION_MONTHS, SubscriptionPackage


class SubscriptionPackageSerializer(serializers.ModelSerializer):
    """
    Admin create/update serializer. Error messages match what the
    admin front end displays next to each field.
    """
    name = serializers.CharField(
        max_length=255,
        error_messages={
            'required': 'Package name is required.',
            'blank': 'Package name is required.',
        },
    )
    description = serializers.CharField(
        error_messages={
            'required': 'Package description is required.',
            'blank': 'Package description is required.',
        },
    )
    duration_months = serializers.IntegerField(
        min_value=MIN_DURATION_MONTHS,
        max_value=MAX_DURATION_MONTHS,
        error_messages={
            'required': 'Duration is required.',
            'min_value': 'Duration must be at least 1 month.',
            'max_value': 'Duration cannot exceed 120 months.',
        },
    )
    price = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal('0'),
        error_messages={
            'required': 'Price is required.',
            'min_value': 'Price must be at least 0.',
        },
    )
    is_active = serializers.BooleanField(required=False, default=True)

    class Meta:
        model = SubscriptionPackage
        fields = [
            'id', 'name', 'description', 'duration_months', 'price',
            'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']


class PackageSummarySerializer(serializers.ModelSerializer):
    """Compact package representation nested in transactions and memberships."""

    class Meta:
        model = SubscriptionPackage
        fields = ['id', 'name', 'duration_months', 'price', 'is_active']
        read_only_fields = fields


class SubscriptionPackageDetailSerializer(SubscriptionPackageSerializer):
    """Package with the memberships and transactions that reference it."""
    memberships = serializers.SerializerMethodField()
    transactions = serializers.SerializerMethodField()

    class Meta(SubscriptionPackageSerializer.Meta):
        fields = SubscriptionPackageSerializer.Meta.fields + ['memberships', 'transactions']

    def get_memberships(self, obj):
        from backend.apps.memberships.serializers import MembershipSerializer  # lazy import to avoid circular deps
        qs = obj.memberships.select_related('user', 'package').order_by('-created_at')
        return MembershipSerializer(qs, many=True, context=self.context).data

    def get_transactions(self, obj):
        from backend.apps.payments.serializers import TransactionSerializer  # lazy import to avoid circular deps
        qs = obj.transactions.select_related('user', 'package').order_by('-created_at')
        return TransactionSerializer(qs, many=True, context=self.context).data
