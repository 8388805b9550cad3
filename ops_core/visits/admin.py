from django.contrib import admin

from ops_core.visits.models import Visit


@admin.register(Visit)
class VisitAdmin(admin.ModelAdmin):
    list_display = ("id", "tenant_id", "customer", "sales_rep", "status", "planned_date", "outcome")
    list_filter = ("status", "visit_type", "outcome")
    search_fields = ("id", "customer__name", "sales_rep__username")
    date_hierarchy = "planned_date"
    list_select_related = ("customer", "sales_rep")
    readonly_fields = ("status", "started_at", "completed_at", "created_at", "updated_at")
