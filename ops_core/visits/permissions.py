# backend/ops_core/visits/permissions.py

from __future__ import annotations

from ops_core.common.permissions import (
    ADMIN_ROLES,
    ROLE_SALES_REP,
    ROLE_SUPERVISOR,
    BaseRolePermission,
    user_roles,
)
from ops_core.iam.services.membership import assigned_rep_ids
from ops_core.visits.models import Visit

FIELD_ROLES = {ROLE_SALES_REP, ROLE_SUPERVISOR}


class VisitPermission(BaseRolePermission):
    """
    Role-based permissions for VisitViewSet.

    High-level policy:
    - SUPER_ADMIN/TENANT_ADMIN: everything in the tenant
    - SUPERVISOR: reads, create, workflow on visits of their assigned reps, missed sweep
    - SALES_REP: reads, create, workflow on own visits
    - WAREHOUSE/DRIVER/CUSTOMER: nothing
    """

    allowed_roles_per_action = {
        "list": FIELD_ROLES,
        "retrieve": FIELD_ROLES,
        "today": FIELD_ROLES,
        "stats": FIELD_ROLES,
        "followups_summary": FIELD_ROLES,
        "create": FIELD_ROLES,
        "quick": FIELD_ROLES,
        "start": FIELD_ROLES,
        "complete": FIELD_ROLES,
        "cancel": FIELD_ROLES,
        "partial_update": FIELD_ROLES,
        "mark_missed": {ROLE_SUPERVISOR},
    }

    def has_object_permission(self, request, view, obj: Visit) -> bool:
        user = request.user
        roles = user_roles(user)

        if roles & ADMIN_ROLES:
            return True

        if ROLE_SALES_REP in roles and obj.sales_rep_id == user.id:
            return True

        if ROLE_SUPERVISOR in roles:
            return obj.sales_rep_id in assigned_rep_ids(supervisor_id=user.id, tenant_id=obj.tenant_id)

        return False
