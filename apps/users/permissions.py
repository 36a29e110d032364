"""Permission classes shared by the API apps."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def is_administrator(user) -> bool:
    if not user or not user.is_authenticated:
        return False
    return bool(getattr(user, "is_administrator", None) and user.is_administrator())


class IsAdministrator(permissions.BasePermission):
    """Only administrators may access the endpoint."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        return is_administrator(request.user)


class IsAdministratorOrReadOnly(permissions.BasePermission):
    """
    Allow administrators to write, but anyone authenticated can read.
    """

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False

        if request.method in permissions.SAFE_METHODS:
            return True

        return is_administrator(user)
