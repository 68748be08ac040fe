from django.urls import path

from . import views

urlpatterns = [
    path('courses/', views.course_list, name='course_list'),
    path('courses/options/', views.course_options, name='course_options'),
    path('courses/save/', views.course_save, name='course_create'),
    path('courses/<int:course_pk>/save/', views.course_save, name='course_update'),
    path('courses/<int:course_pk>/delete/', views.course_delete, name='course_delete'),

    path('classes/', views.class_list, name='class_list'),
    path('classes/sections/', views.available_sections, name='class_available_sections'),
    path('classes/create/', views.class_create, name='class_create'),
    path('classes/mine/', views.my_classes, name='class_my_classes'),
    path('classes/<int:class_id>/', views.class_detail, name='class_detail'),
    path('classes/<int:class_id>/students/', views.class_students, name='class_students'),
    path('classes/<int:class_id>/teacher/', views.class_assign_teacher, name='class_assign_teacher'),
    path('classes/<int:class_id>/delete/', views.class_delete, name='class_delete'),
    path('classes/<int:class_id>/roster/add/', views.class_add_student, name='class_add_student'),
    path('classes/<int:class_id>/roster/remove/', views.class_remove_student, name='class_remove_student'),
    path('classes/<int:class_id>/roster/refresh/', views.class_refresh_roster, name='class_refresh_roster'),

    path('schedule/', views.my_schedule, name='teacher_schedule'),
    path('timetable/filters/', views.timetable_filters, name='timetable_filters'),
    path('timetable/section/', views.section_schedule, name='timetable_section_schedule'),

    path('materials/', views.material_list, name='material_list'),
    path('materials/upload/', views.material_upload, name='material_upload'),
    path('materials/<int:material_id>/delete/', views.material_delete, name='material_delete'),
]
