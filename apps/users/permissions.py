"""Role checks shared by the listings, bookings and credits APIs."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def is_admin(user) -> bool:
    if not user or not user.is_authenticated:
        return False
    if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
        return True
    return hasattr(user, "is_admin") and user.is_admin()


def can_create_listing(user) -> bool:
    """Skill providers and admins publish listings."""
    if not user or not user.is_authenticated:
        return False
    return user.is_skill_provider() or is_admin(user)


def can_book_session(user) -> bool:
    """Project creators and admins book sessions."""
    if not user or not user.is_authenticated:
        return False
    return user.is_project_creator() or is_admin(user)


class IsPlatformAdmin(permissions.BasePermission):
    """Staff, superusers and users with the ADMIN role."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        return is_admin(request.user)


class IsOwnerOrAdmin(permissions.BasePermission):
    """
    Object-level permission: safe methods for everyone, writes only for the
    object's owner (``owner_field`` on the view, ``owner`` by default) or an
    admin.
    """

    def has_object_permission(self, request, view, obj) -> bool:  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        owner_field = getattr(view, "owner_field", "owner")
        return getattr(obj, f"{owner_field}_id", None) == request.user.pk or is_admin(request.user)


class IsSelfOrAdmin(permissions.BasePermission):
    """Object-level: a user record is edited by that user or an admin."""

    def has_object_permission(self, request, view, obj) -> bool:  # type: ignore
        return obj.pk == request.user.pk or is_admin(request.user)
