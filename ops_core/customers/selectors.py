# backend/ops_core/customers/selectors.py
from __future__ import annotations

from uuid import UUID

from ops_core.customers.models import Customer


def customer_in_tenant(*, tenant_id: UUID, customer_id: UUID) -> bool:
    return Customer.objects.filter(id=customer_id, tenant_id=tenant_id).exists()
