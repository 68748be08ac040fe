from django.contrib import admin

from .models import Student


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ('college_id', 'name', 'program', 'branch', 'year', 'section', 'status', 'type')
    list_filter = ('program', 'branch', 'year', 'status', 'type')
    search_fields = ('college_id', 'name', 'email')
    readonly_fields = ('doc_id', 'created_at', 'updated_at')
