# backend/ops_core/common/permissions.py

from __future__ import annotations

from typing import Set

from rest_framework.permissions import BasePermission, SAFE_METHODS

# Role names. Stored on UserProfile.role and mirrored as Django auth Group names.
ROLE_SUPER_ADMIN = "SUPER_ADMIN"
ROLE_TENANT_ADMIN = "TENANT_ADMIN"
ROLE_SUPERVISOR = "SUPERVISOR"
ROLE_SALES_REP = "SALES_REP"
ROLE_WAREHOUSE = "WAREHOUSE"
ROLE_DRIVER = "DRIVER"
ROLE_CUSTOMER = "CUSTOMER"

ALL_ROLES = (
    ROLE_SUPER_ADMIN,
    ROLE_TENANT_ADMIN,
    ROLE_SUPERVISOR,
    ROLE_SALES_REP,
    ROLE_WAREHOUSE,
    ROLE_DRIVER,
    ROLE_CUSTOMER,
)

ADMIN_ROLES = frozenset({ROLE_SUPER_ADMIN, ROLE_TENANT_ADMIN})


def user_roles(user) -> Set[str]:
    """
    Resolve roles from:
    1) the user's profile role (ops_profile.role)
    2) Django groups (user.groups)

    Superusers are always SUPER_ADMIN.
    """
    roles: Set[str] = set()

    if not user or not getattr(user, "is_authenticated", False):
        return roles

    if getattr(user, "is_superuser", False):
        roles.add(ROLE_SUPER_ADMIN)
        return roles

    profile = getattr(user, "ops_profile", None)
    if profile is not None and profile.is_active and profile.role:
        roles.add(str(profile.role))

    if hasattr(user, "groups"):
        roles.update(user.groups.values_list("name", flat=True))

    return roles


def is_admin(user) -> bool:
    return bool(user_roles(user) & ADMIN_ROLES)


class BaseRolePermission(BasePermission):
    """
    Role-based access keyed by ViewSet action.

    - Admin roles bypass the map.
    - Unknown SAFE actions fall back to list/retrieve.
    - Unknown unsafe actions are denied.
    """
    message = "You do not have permission to perform this action."

    # Override in subclasses: dict of action -> set of allowed roles
    allowed_roles_per_action: dict[str, set[str]] = {}

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not getattr(user, "is_authenticated", False):
            return False

        roles = user_roles(user)
        if roles & ADMIN_ROLES:
            return True

        action = getattr(view, "action", None)
        allowed = self.allowed_roles_per_action.get(action)

        if allowed is None and request.method in SAFE_METHODS:
            kwargs = getattr(view, "kwargs", {}) or {}
            read_action = "retrieve" if "pk" in kwargs else "list"
            allowed = self.allowed_roles_per_action.get(read_action)

        if allowed is None:
            return False
        return bool(roles & allowed)
