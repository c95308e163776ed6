"""Role-based permission classes shared by the marketplace APIs."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore

from shared.domain.value_objects import Principal


def principal_from_request(request) -> Principal:  # type: ignore
    """The authenticated principal for a DRF request."""
    return request.user.as_principal()


class IsAdmin(permissions.BasePermission):
    """Only administrators (role admin, staff or superuser)."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        return bool(user and user.is_authenticated and user.is_admin())


class IsOwnerOrAdmin(permissions.BasePermission):
    """Spa owners and administrators."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return user.is_admin() or user.is_owner()


class IsCustomer(permissions.BasePermission):
    """Customers only; used for actions that book or review on their own behalf."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        return bool(user and user.is_authenticated and user.is_customer())
