# backend/ops_core/tenants/selectors.py
from __future__ import annotations

from uuid import UUID

from ops_core.tenants.models import Tenant, TenantStatus


def is_tenant_active(*, tenant_id: UUID) -> bool:
    return Tenant.objects.filter(id=tenant_id, status=TenantStatus.ACTIVE).exists()
