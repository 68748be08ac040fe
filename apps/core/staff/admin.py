from django.contrib import admin

from .models import Administrator, Teacher


@admin.register(Teacher)
class TeacherAdmin(admin.ModelAdmin):
    list_display = ('staff_id', 'name', 'department', 'position', 'program', 'status')
    list_filter = ('department', 'status')
    search_fields = ('staff_id', 'name', 'email')
    readonly_fields = ('doc_id', 'created_at', 'updated_at')


@admin.register(Administrator)
class AdministratorAdmin(admin.ModelAdmin):
    list_display = ('staff_id', 'name', 'department', 'status')
    search_fields = ('staff_id', 'name', 'email')
    readonly_fields = ('doc_id', 'created_at', 'updated_at')
