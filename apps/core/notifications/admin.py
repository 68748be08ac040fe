from django.contrib import admin

from .models import DispatchTask, Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('timestamp', 'title', 'recipient', 'type', 'read')
    list_filter = ('type', 'read')
    search_fields = ('title', 'message', 'recipient__email')


@admin.register(DispatchTask)
class DispatchTaskAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'kind', 'status', 'attempts', 'max_attempts', 'available_at')
    list_filter = ('status', 'kind')
    search_fields = ('kind', 'last_error')
