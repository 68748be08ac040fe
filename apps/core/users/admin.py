from django.contrib import admin
from .models import AuditLog, Identity, ProvisioningSaga, User

@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('email', 'uid', 'role', 'email_verified', 'is_active')
    list_filter = ('role', 'email_verified', 'is_active')
    search_fields = ('email', 'uid', 'first_name', 'last_name')


@admin.register(Identity)
class IdentityAdmin(admin.ModelAdmin):
    list_display = ('name', 'email', 'role', 'college_id', 'staff_id', 'notifications_enabled')
    list_filter = ('role', 'program')
    search_fields = ('name', 'email', 'college_id', 'staff_id')


@admin.register(ProvisioningSaga)
class ProvisioningSagaAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'email', 'role', 'status', 'attempts', 'uid')
    list_filter = ('status', 'role')
    search_fields = ('email', 'uid', 'error')


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'action', 'user', 'target_model', 'target_id')
    list_filter = ('action', 'method', 'created_at')
    search_fields = ('details', 'path', 'target_model', 'target_id', 'user__email')
