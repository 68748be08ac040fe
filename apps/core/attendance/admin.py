from django.contrib import admin

from .models import AttendanceRecord


@admin.register(AttendanceRecord)
class AttendanceRecordAdmin(admin.ModelAdmin):
    list_display = ('date', 'period', 'student', 'course_code', 'status', 'program', 'branch', 'year')
    list_filter = ('status', 'program', 'branch', 'year', 'date')
    search_fields = ('record_key', 'student__college_id', 'student__name', 'course_code')
