from django.contrib import admin

from .models import CollegeClass, Course, Material


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ('course_id', 'name', 'program', 'branch', 'semester', 'credits')
    list_filter = ('program', 'branch', 'semester')
    search_fields = ('course_id', 'name')


@admin.register(CollegeClass)
class CollegeClassAdmin(admin.ModelAdmin):
    list_display = ('course', 'program', 'branch', 'year', 'semester', 'section', 'teacher')
    list_filter = ('program', 'branch', 'year', 'semester')
    filter_horizontal = ('students',)


@admin.register(Material)
class MaterialAdmin(admin.ModelAdmin):
    list_display = ('title', 'course', 'material_type', 'uploaded_by', 'upload_date')
    list_filter = ('material_type',)
    search_fields = ('title',)
