"""User API views."""

from __future__ import annotations

from rest_framework import generics, permissions  # type: ignore

from .serializers import UserSerializer


class CurrentUserView(generics.RetrieveUpdateAPIView):
    """Profile of the authenticated user."""

    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated]
    http_method_names = ["get", "patch"]

    def get_object(self):  # type: ignore
        return self.request.user
