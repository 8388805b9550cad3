from django.contrib import admin

from ops_core.tenants.models import Tenant


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ("name", "subdomain", "plan", "status", "created_at")
    list_filter = ("status", "plan")
    search_fields = ("name", "subdomain")
    readonly_fields = ("created_at", "updated_at")
    ordering = ("-created_at",)
