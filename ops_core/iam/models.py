# backend/ops_core/iam/models.py
import uuid
from django.conf import settings
from django.db import models

from ops_core.tenants.models import Tenant


class UserRole(models.TextChoices):
    SUPER_ADMIN = "SUPER_ADMIN", "Super admin"
    TENANT_ADMIN = "TENANT_ADMIN", "Tenant admin"
    SUPERVISOR = "SUPERVISOR", "Supervisor"
    SALES_REP = "SALES_REP", "Sales rep"
    WAREHOUSE = "WAREHOUSE", "Warehouse"
    DRIVER = "DRIVER", "Driver"
    CUSTOMER = "CUSTOMER", "Customer"


class UserProfile(models.Model):
    """
    Tenant-scoped identity wrapper around AUTH_USER_MODEL.

    One profile per user: the tenant the user works in and their role there.
    Sales reps may point at the supervisor who oversees their visits.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="ops_profile")
    tenant = models.ForeignKey(Tenant, on_delete=models.PROTECT, related_name="user_profiles")

    role = models.CharField(max_length=32, choices=UserRole.choices, db_index=True)

    supervisor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="supervised_profiles",
        null=True,
        blank=True,
    )

    phone = models.CharField(max_length=50, blank=True, default="")
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "iam_user_profile"
        indexes = [
            models.Index(fields=["tenant", "role"], name="iam_prof_tenant_role_idx"),
            models.Index(fields=["tenant", "supervisor"], name="iam_prof_tenant_sup_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.user.username} ({self.role} @ {self.tenant.subdomain})"
