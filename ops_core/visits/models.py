# backend/ops_core/visits/models.py
from django.conf import settings
from django.db import models

from ops_core.common.models import TenantScopedModel
from ops_core.customers.models import Customer


class VisitStatus(models.TextChoices):
    PLANNED = "planned", "Planned"
    IN_PROGRESS = "in_progress", "In Progress"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"
    MISSED = "missed", "Missed"


class VisitType(models.TextChoices):
    SCHEDULED = "scheduled", "Scheduled"
    AD_HOC = "ad_hoc", "Ad hoc"
    PHONE_CALL = "phone_call", "Phone call"


class VisitOutcome(models.TextChoices):
    ORDER_PLACED = "order_placed", "Order placed"
    NO_ORDER = "no_order", "No order"
    FOLLOW_UP = "follow_up", "Follow up"
    NOT_AVAILABLE = "not_available", "Not available"


class Visit(TenantScopedModel):
    """
    A sales rep's visit to a customer.

    Start/end coordinates and timestamps stay null until the matching
    transition happens.
    """
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name="visits")
    sales_rep = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="sales_visits",
    )

    visit_type = models.CharField(max_length=16, choices=VisitType.choices, default=VisitType.SCHEDULED)
    status = models.CharField(
        max_length=16,
        choices=VisitStatus.choices,
        default=VisitStatus.PLANNED,
        db_index=True,
    )
    outcome = models.CharField(max_length=16, choices=VisitOutcome.choices, null=True, blank=True)

    planned_date = models.DateField(db_index=True)
    planned_time = models.TimeField(null=True, blank=True)

    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    start_latitude = models.DecimalField(max_digits=10, decimal_places=8, null=True, blank=True)
    start_longitude = models.DecimalField(max_digits=11, decimal_places=8, null=True, blank=True)
    end_latitude = models.DecimalField(max_digits=10, decimal_places=8, null=True, blank=True)
    end_longitude = models.DecimalField(max_digits=11, decimal_places=8, null=True, blank=True)

    notes = models.TextField(null=True, blank=True)
    tags = models.JSONField(default=list, blank=True)

    outcome_notes = models.TextField(null=True, blank=True)
    photos = models.JSONField(default=list, blank=True)
    no_order_reason = models.TextField(null=True, blank=True)

    follow_up_reason = models.TextField(null=True, blank=True)
    follow_up_date = models.DateField(null=True, blank=True, db_index=True)
    follow_up_time = models.TimeField(null=True, blank=True)

    cancel_reason = models.TextField(null=True, blank=True)

    # Order placed during the visit (orders live outside this service).
    order_id = models.UUIDField(null=True, blank=True)

    class Meta:
        db_table = "visits_visit"
        indexes = [
            models.Index(fields=["tenant_id", "planned_date"], name="visit_tenant_date_idx"),
            models.Index(fields=["tenant_id", "sales_rep", "planned_date"], name="visit_tenant_rep_date_idx"),
            models.Index(fields=["tenant_id", "status", "planned_date"], name="visit_tenant_status_idx"),
            models.Index(fields=["tenant_id", "outcome", "follow_up_date"], name="visit_tenant_followup_idx"),
        ]

    def __str__(self) -> str:
        return f"Visit {self.id} ({self.status})"
