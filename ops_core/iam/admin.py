from django.contrib import admin

from ops_core.iam.models import UserProfile


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "tenant", "role", "supervisor", "is_active", "created_at")
    list_filter = ("role", "is_active", "tenant")
    search_fields = ("user__username", "user__email", "tenant__subdomain")
    list_select_related = ("user", "tenant", "supervisor")
    readonly_fields = ("created_at", "updated_at")
