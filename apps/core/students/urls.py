from django.urls import path

from . import views

urlpatterns = [
    path('', views.student_list, name='student_list'),
    path('create/', views.student_create, name='student_create'),
    path('register/', views.student_register, name='student_register'),
    path('sections/', views.section_list, name='student_section_list'),
    path('sections/students/', views.section_students, name='student_section_students'),
    path('me/', views.my_profile, name='student_my_profile'),
    path('me/courses/', views.my_courses, name='student_my_courses'),
    path('me/schedule/', views.my_schedule, name='student_my_schedule'),
    path('me/performance/', views.my_performance, name='student_my_performance'),
    path('<str:doc_id>/', views.student_detail, name='student_detail'),
    path('<str:doc_id>/update/', views.student_update, name='student_update'),
    path('<str:doc_id>/delete/', views.student_delete, name='student_delete'),
    path('<str:doc_id>/teacher-view/', views.student_profile_for_teacher, name='student_teacher_view'),
    path('<str:doc_id>/performance/', views.student_performance, name='student_performance'),
]
