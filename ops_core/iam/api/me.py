# backend/ops_core/iam/api/me.py

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ops_core.common.permissions import user_roles
from ops_core.iam.api.schema_serializers import MeResponseSerializer
from ops_core.iam.scope import assert_user_membership, resolve_scope_from_headers
from ops_core.iam.services.membership import describe_profile, get_active_profile


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["IAM"], responses={200: MeResponseSerializer})
    def get(self, request):
        """
        User info, profile and roles.
        The scope header is optional here; if sent it must be valid and
        the user must have access to that tenant.
        """
        scope = resolve_scope_from_headers(request)
        if scope is not None:
            assert_user_membership(request.user, scope)
            request.scope = scope
            request.tenant_id = scope.tenant_id

        active_scope = None
        if getattr(request, "scope", None):
            active_scope = {"tenant_id": str(request.scope.tenant_id)}

        return Response(
            {
                "user": {
                    "id": request.user.id,
                    "username": getattr(request.user, "username", None),
                    "email": getattr(request.user, "email", None),
                    "is_superuser": bool(getattr(request.user, "is_superuser", False)),
                },
                "profile": describe_profile(get_active_profile(request.user.id)),
                "roles": sorted(user_roles(request.user)),
                "active_scope": active_scope,
            },
            status=status.HTTP_200_OK,
        )
