from django.urls import path

from . import views

urlpatterns = [
    path('', views.exam_list, name='exam_list'),
    path('save/', views.exam_save, name='exam_create'),
    path('<int:exam_id>/save/', views.exam_save, name='exam_update'),
    path('<int:exam_id>/delete/', views.exam_delete, name='exam_delete'),
    path('publish/', views.exam_session_publish, name='exam_session_publish'),
    path('classes/<int:class_id>/marks/', views.marks_for_class, name='exam_class_marks'),
    path('classes/<int:class_id>/marks/save/', views.marks_save, name='exam_class_marks_save'),
    path('me/', views.my_exams, name='exam_my_exams'),
    path('me/results/', views.my_results, name='exam_my_results'),
    path('me/hall-ticket/', views.my_hall_ticket, name='exam_my_hall_ticket'),
    path('me/hall-ticket/pdf/', views.my_hall_ticket_pdf, name='exam_my_hall_ticket_pdf'),
]
