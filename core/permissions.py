"""
Permission classes for identity and role based access control.

These raise the classified errors directly instead of returning
``False`` so that the response carries the contract code: ``AUTH_001``
when nobody is authenticated and ``AUTH_003`` when the role is wrong.
"""
from __future__ import annotations

from typing import Iterable, Optional

from rest_framework.permissions import BasePermission

from core.exceptions import AuthenticationRequired, InsufficientPermissions
from core.models import Role


def _identity(request):
    user = getattr(request, "user", None)
    if not (user and getattr(user, "is_authenticated", False)):
        raise AuthenticationRequired()
    return user


def ensure_role(request, allowed_roles: Iterable[Role | str]):
    """Return the request identity if its role is allowed."""
    identity = _identity(request)
    if getattr(identity, "role", None) not in {Role(r) for r in allowed_roles}:
        raise InsufficientPermissions()
    return identity


class IsAuthenticatedIdentity(BasePermission):
    """Require a verified identity on the request."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        _identity(request)
        return True


def authorize(*allowed_roles: Role | str, methods: Optional[Iterable[str]] = None) -> type[BasePermission]:
    """Build a permission class that admits only ``allowed_roles``.

    With ``methods`` the check applies only to those HTTP methods, e.g.
    ``authorize(Role.ADMIN, methods=["DELETE"])``.
    """
    roles = frozenset(Role(r) for r in allowed_roles)
    guarded = frozenset(m.upper() for m in methods) if methods else None

    class RoleRequired(BasePermission):
        def has_permission(self, request, view) -> bool:  # type: ignore[override]
            if guarded is not None and request.method not in guarded:
                return True
            ensure_role(request, roles)
            return True

    RoleRequired.__name__ = f"RoleRequired_{'_'.join(sorted(roles))}"
    return RoleRequired


IsAdminRole = authorize(Role.ADMIN)
