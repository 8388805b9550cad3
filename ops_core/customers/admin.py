from django.contrib import admin

from ops_core.customers.models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("name", "tenant_id", "phone", "assigned_sales_rep", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name", "phone", "contact_person")
    list_select_related = ("assigned_sales_rep",)
    readonly_fields = ("created_at", "updated_at")
