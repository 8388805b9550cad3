# backend/ops_core/common/scope.py
from __future__ import annotations

from uuid import UUID

from rest_framework.exceptions import ValidationError

from ops_core.iam.scope import MISSING_SCOPE_MSG, assert_user_membership, resolve_scope_from_headers


def require_tenant_id(request) -> UUID:
    """
    Tenant scope for a DRF view.

    Prefers what middleware/auth already attached. Otherwise resolves the
    header here and checks membership, so views behave the same when the
    user was force-authenticated.
    """
    tenant_id = getattr(request, "tenant_id", None)
    if tenant_id:
        return tenant_id if isinstance(tenant_id, UUID) else UUID(str(tenant_id))

    scope = resolve_scope_from_headers(request)
    if scope is None:
        raise ValidationError(MISSING_SCOPE_MSG)

    assert_user_membership(request.user, scope)
    request.tenant_id = scope.tenant_id
    request.scope = scope
    return scope.tenant_id
