from django.contrib import admin

from .models import Application, Opportunity


@admin.register(Opportunity)
class OpportunityAdmin(admin.ModelAdmin):
    list_display = ('company', 'role', 'type', 'status', 'posted_at')
    list_filter = ('type', 'status')
    search_fields = ('company', 'role')


@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    list_display = ('student', 'company', 'role', 'opportunity_type', 'status', 'applied_at')
    list_filter = ('opportunity_type', 'status')
    search_fields = ('student__college_id', 'company')
