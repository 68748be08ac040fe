from django.urls import path

from . import views

urlpatterns = [
    path('', views.staff_list, name='staff_list'),
    path('teachers/', views.teacher_list, name='staff_teacher_list'),
    path('teachers/assignable/', views.assignable_teachers, name='staff_assignable_teachers'),
    path('create/', views.staff_create, name='staff_create'),
    path('register-admin/', views.admin_register, name='staff_admin_register'),
    path('me/', views.my_profile, name='staff_my_profile'),
    path('<str:doc_id>/', views.staff_detail, name='staff_detail'),
    path('<str:doc_id>/update/', views.staff_update, name='staff_update'),
    path('<str:doc_id>/delete/', views.teacher_delete, name='staff_teacher_delete'),
]
