from rest_framework import serializers

from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Public view of a user, nested into transactions and memberships."""

    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'phone', 'role', 'date_joined']
        read_only_fields = fields
