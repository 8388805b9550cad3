from django.contrib import admin

from ops_core.audit.models import AuditEvent


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ("occurred_at", "event_code", "entity_type", "entity_id", "tenant_id", "actor_user")
    list_filter = ("event_code", "entity_type")
    search_fields = ("entity_id", "event_code")
    readonly_fields = [f.name for f in AuditEvent._meta.fields]
