# backend/ops_core/iam/services/membership.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from ops_core.iam.models import UserProfile, UserRole
from ops_core.tenants.models import TenantStatus


def get_active_profile(user_id: int) -> Optional[UserProfile]:
    return (
        UserProfile.objects.select_related("tenant", "supervisor")
        .filter(user_id=user_id, is_active=True)
        .first()
    )


def is_user_member_of_tenant(*, user_id: int, tenant_id: UUID) -> bool:
    """
    Validate user -> tenant membership.
    Single source of truth used by scope enforcement.
    Suspended or deleted tenants have no members.
    """
    return UserProfile.objects.filter(
        user_id=user_id,
        tenant_id=tenant_id,
        is_active=True,
        tenant__status=TenantStatus.ACTIVE,
    ).exists()


def assigned_rep_ids(*, supervisor_id: int, tenant_id: UUID) -> list[int]:
    """
    Sales reps whose profile names this user as their supervisor.
    """
    return list(
        UserProfile.objects.filter(
            tenant_id=tenant_id,
            supervisor_id=supervisor_id,
            role=UserRole.SALES_REP,
            is_active=True,
        ).values_list("user_id", flat=True)
    )


def is_sales_rep_of_tenant(*, user_id: int, tenant_id: UUID) -> bool:
    return UserProfile.objects.filter(
        user_id=user_id,
        tenant_id=tenant_id,
        role=UserRole.SALES_REP,
        is_active=True,
    ).exists()


def describe_profile(profile: Optional[UserProfile]) -> Optional[dict]:
    """
    Profile summary for /me.
    """
    if profile is None:
        return None

    t = profile.tenant
    return {
        "tenant_id": str(t.id),
        "tenant_name": t.name,
        "tenant_subdomain": t.subdomain,
        "tenant_status": t.status,
        "role": profile.role,
        "supervisor_id": profile.supervisor_id,
    }
