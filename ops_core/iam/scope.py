# backend/ops_core/iam/scope.py
from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from rest_framework.exceptions import PermissionDenied, ValidationError

from ops_core.common.permissions import ROLE_SUPER_ADMIN, user_roles
from ops_core.iam.services import membership
from ops_core.tenants.selectors import is_tenant_active


@dataclass(frozen=True)
class Scope:
    tenant_id: UUID


HDR_TENANT = "X-Tenant-Id"

MISSING_SCOPE_MSG = "Missing scope header. Provide X-Tenant-Id."
INVALID_SCOPE_MSG = "Invalid scope header. Provide a valid UUID for X-Tenant-Id."
NO_ACCESS_MSG = "You do not have access to the selected tenant."


def parse_tenant_id(value) -> UUID | None:
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


def _get_header(request, name: str) -> str | None:
    # request.headers is case-insensitive; fall back to META for RequestFactory
    headers = getattr(request, "headers", None)
    if headers is not None:
        v = headers.get(name)
        if v:
            return v
    return request.META.get("HTTP_" + name.upper().replace("-", "_"))


def resolve_scope_from_headers(request) -> Scope | None:
    """
    Reads the scope header. Returns None if it is absent.
    Raises 400 if it is present but not a UUID.
    """
    raw = _get_header(request, HDR_TENANT)
    if not raw:
        return None

    tenant_id = parse_tenant_id(raw)
    if tenant_id is None:
        raise ValidationError(INVALID_SCOPE_MSG)
    return Scope(tenant_id=tenant_id)


def can_access_tenant(user, tenant_id: UUID) -> bool:
    """
    SUPER_ADMIN may enter any active tenant; everyone else needs an
    active profile in it.
    """
    if not user or not getattr(user, "is_authenticated", False):
        return False

    if ROLE_SUPER_ADMIN in user_roles(user):
        return is_tenant_active(tenant_id=tenant_id)

    return membership.is_user_member_of_tenant(user_id=user.id, tenant_id=tenant_id)


def assert_user_membership(user, scope: Scope) -> None:
    if not user or not getattr(user, "is_authenticated", False):
        raise PermissionDenied("Authentication required to set scope.")

    if not can_access_tenant(user, scope.tenant_id):
        raise PermissionDenied(NO_ACCESS_MSG)


def apply_scope_from_headers(request, user=None) -> Scope | None:
    """
    Used by the auth layer once the user is known.

    If the scope header is present: validates it, verifies membership and
    attaches request.scope / request.tenant_id. Otherwise does nothing.
    """
    scope = resolve_scope_from_headers(request)
    if scope is None:
        return None

    u = user or getattr(request, "user", None)
    assert_user_membership(u, scope)

    request.tenant_id = scope.tenant_id
    request.scope = scope
    return scope
