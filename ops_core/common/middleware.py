from __future__ import annotations

from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

from ops_core.common.api.exceptions import build_error_envelope
from ops_core.iam.scope import (
    HDR_TENANT,
    INVALID_SCOPE_MSG,
    MISSING_SCOPE_MSG,
    NO_ACCESS_MSG,
    Scope,
    can_access_tenant,
    parse_tenant_id,
)


class TenantScopeMiddleware(MiddlewareMixin):
    """
    Enforces tenant scope for session-authenticated API requests.

    Token-authenticated requests are scoped by ScopedJWTAuthentication,
    because their user is only known once DRF authenticates them.

    Behavior:
      - Enforced under /api/v1/.
      - Auth, docs and schema endpoints are never scoped.
      - /me/ accepts a missing header, but a present one must be valid.
      - Missing or invalid header -> 400, not a member -> 403.
      - On success attaches request.scope and request.tenant_id.
    """

    ENFORCED_PREFIX = "/api/v1/"

    PUBLIC_PATH_PREFIXES = (
        "/admin/",
        "/api/docs/",
        "/api/schema/",
        "/api/v1/auth/",
    )

    ALLOW_NO_SCOPE_SUFFIXES = ("/me/",)

    def _json_error(self, request, *, status_code: int, code: str, message: str) -> JsonResponse:
        return JsonResponse(
            build_error_envelope(request=request, code=code, message=message, details=None),
            status=status_code,
        )

    def process_request(self, request):
        request.scope = None
        request.tenant_id = None

        path = getattr(request, "path", "") or ""

        if not path.startswith(self.ENFORCED_PREFIX) or path == self.ENFORCED_PREFIX:
            return None
        if any(path.startswith(p) for p in self.PUBLIC_PATH_PREFIXES):
            return None

        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return None

        raw = request.META.get("HTTP_" + HDR_TENANT.upper().replace("-", "_"))
        if not raw:
            if any(path.endswith(s) for s in self.ALLOW_NO_SCOPE_SUFFIXES):
                return None
            return self._json_error(request, status_code=400, code="validation_error", message=MISSING_SCOPE_MSG)

        tenant_id = parse_tenant_id(raw)
        if tenant_id is None:
            return self._json_error(request, status_code=400, code="validation_error", message=INVALID_SCOPE_MSG)

        if not can_access_tenant(user, tenant_id):
            return self._json_error(request, status_code=403, code="permission_denied", message=NO_ACCESS_MSG)

        request.scope = Scope(tenant_id=tenant_id)
        request.tenant_id = tenant_id
        return None
