"""Role based permission classes shared by all apps."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def user_is_admin(user) -> bool:  # type: ignore
    if not user or not user.is_authenticated:
        return False
    if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
        return True
    return hasattr(user, "is_admin") and user.is_admin()


class IsTenantAdmin(permissions.BasePermission):
    """Only admins (property managers) and platform staff."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        return user_is_admin(request.user)


class IsTenantAdminOrReadOnly(permissions.BasePermission):
    """Anyone can read, only admins can write."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        return user_is_admin(request.user)
