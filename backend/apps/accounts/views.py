"""
Accounts views for the Subscription Platform.
"""
from rest_framework import generics
from rest_framework.permissions import IsAuthenticated

from .serializers import UserSerializer


class CurrentUserView(generics.RetrieveAPIView):
    """Identity and role of the authenticated user."""
    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated]

    def get_object(self):
        return self.request.user
