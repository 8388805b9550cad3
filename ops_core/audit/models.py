# backend/ops_core/audit/models.py
from django.conf import settings
from django.db import models

from ops_core.common.models import TenantScopedModel


class AuditEvent(TenantScopedModel):
    """
    Immutable audit record, written in the same transaction as the change it
    describes.
    """
    event_code = models.CharField(max_length=128, db_index=True)  # e.g. "visit.started"
    entity_type = models.CharField(max_length=128, db_index=True)  # e.g. "Visit"
    entity_id = models.UUIDField(db_index=True)

    actor_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="audit_events",
        null=True,
        blank=True,
    )

    occurred_at = models.DateTimeField(auto_now_add=True, db_index=True)
    metadata = models.JSONField(default=dict)

    class Meta:
        db_table = "audit_audit_event"
        indexes = [
            models.Index(fields=["tenant_id", "occurred_at"], name="audit_tenant_time_idx"),
            models.Index(fields=["entity_type", "entity_id"], name="audit_entity_idx"),
            models.Index(fields=["tenant_id", "event_code"], name="audit_tenant_code_idx"),
        ]
