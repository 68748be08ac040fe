from django.contrib import admin

from .models import Backlog, ExamSchedule, HallTicket, Mark


@admin.register(ExamSchedule)
class ExamScheduleAdmin(admin.ModelAdmin):
    list_display = ('exam_session_name', 'course_code', 'program', 'branch', 'year', 'date', 'status')
    list_filter = ('program', 'branch', 'year', 'status')
    search_fields = ('exam_session_name', 'course_code', 'course_name')


@admin.register(HallTicket)
class HallTicketAdmin(admin.ModelAdmin):
    list_display = ('college_id', 'student_name', 'semester', 'exam_session_name', 'generated_at')
    search_fields = ('college_id', 'student_name')


@admin.register(Mark)
class MarkAdmin(admin.ModelAdmin):
    list_display = ('student', 'course', 'semester', 'grade', 'total_marks')
    list_filter = ('semester', 'grade')


@admin.register(Backlog)
class BacklogAdmin(admin.ModelAdmin):
    list_display = ('student', 'course', 'semester', 'status')
    list_filter = ('status',)
