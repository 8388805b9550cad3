# backend/ops_core/customers/models.py
from django.conf import settings
from django.db import models

from ops_core.common.models import TenantScopedModel


class Customer(TenantScopedModel):
    """
    Outlet a sales rep visits. Plain tenant-scoped record.
    """
    name = models.CharField(max_length=255)
    contact_person = models.CharField(max_length=255, blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    address = models.TextField(blank=True, default="")

    latitude = models.DecimalField(max_digits=10, decimal_places=8, null=True, blank=True)
    longitude = models.DecimalField(max_digits=11, decimal_places=8, null=True, blank=True)

    assigned_sales_rep = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="assigned_customers",
        null=True,
        blank=True,
    )

    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        db_table = "customers_customer"
        indexes = [
            models.Index(fields=["tenant_id", "name"], name="cust_tenant_name_idx"),
            models.Index(fields=["tenant_id", "assigned_sales_rep"], name="cust_tenant_rep_idx"),
        ]

    def __str__(self) -> str:
        return self.name
