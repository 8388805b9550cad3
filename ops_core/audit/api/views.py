# backend/ops_core/audit/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated

from ops_core.audit.api.serializers import AuditEventSerializer
from ops_core.audit.models import AuditEvent
from ops_core.audit.selectors import list_audit_events
from ops_core.common.api.pagination import paginate
from ops_core.common.permissions import BaseRolePermission
from ops_core.common.scope import require_tenant_id


class AuditEventPermission(BaseRolePermission):
    # Admin roles bypass the map; nobody else reads the trail.
    allowed_roles_per_action = {}


class AuditEventViewSet(viewsets.GenericViewSet):
    """
    Tenant audit trail, newest first.
    """
    permission_classes = [IsAuthenticated, AuditEventPermission]

    serializer_class = AuditEventSerializer
    queryset = AuditEvent.objects.none()

    @extend_schema(
        tags=["Audit"],
        responses={200: AuditEventSerializer(many=True)},
        parameters=[
            OpenApiParameter(
                name="entity_type",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Filter by entity type (e.g. Visit).",
            ),
            OpenApiParameter(
                name="entity_id",
                type=OpenApiTypes.UUID,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Filter by entity UUID.",
            ),
            OpenApiParameter(
                name="event_code",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Filter by event code (e.g. visit.completed).",
            ),
            OpenApiParameter(
                name="actor_user_id",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Filter by actor user id.",
            ),
        ],
    )
    def list(self, request):
        tenant_id = require_tenant_id(request)

        entity_type = request.query_params.get("entity_type") or None
        entity_id_raw = request.query_params.get("entity_id") or None
        event_code = request.query_params.get("event_code") or None
        actor_user_raw = request.query_params.get("actor_user_id")

        entity_id = None
        if entity_id_raw:
            try:
                entity_id = UUID(str(entity_id_raw))
            except ValueError:
                raise ValidationError({"entity_id": ["Invalid UUID."]})

        actor_user_id = None
        if actor_user_raw:
            try:
                actor_user_id = int(actor_user_raw)
            except ValueError:
                raise ValidationError({"actor_user_id": ["A valid integer is required."]})

        qs = list_audit_events(
            tenant_id=tenant_id,
            entity_type=entity_type,
            entity_id=entity_id,
            event_code=event_code,
            actor_user_id=actor_user_id,
        )
        return paginate(request, qs, AuditEventSerializer)
