from django.contrib import admin

from .models import Counter


@admin.register(Counter)
class CounterAdmin(admin.ModelAdmin):
    list_display = ('key', 'current', 'updated_at')
    search_fields = ('key',)
    readonly_fields = ('updated_at',)
