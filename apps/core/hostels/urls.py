from django.urls import path

from . import views

urlpatterns = [
    path('', views.hostel_list, name='hostel_list'),
    path('create/', views.hostel_create, name='hostel_create'),
    path('residents/remove/', views.room_remove, name='hostel_room_remove'),
    path('complaints/', views.complaint_list, name='hostel_complaint_list'),
    path('complaints/<int:complaint_id>/status/', views.complaint_update_status, name='hostel_complaint_status'),
    path('me/', views.my_hostel, name='hostel_my_hostel'),
    path('me/complaints/', views.my_complaint, name='hostel_my_complaint'),
    path('<int:hostel_id>/', views.hostel_detail, name='hostel_detail'),
    path('<int:hostel_id>/update/', views.hostel_update, name='hostel_update'),
    path('<int:hostel_id>/delete/', views.hostel_delete, name='hostel_delete'),
    path('<int:hostel_id>/rooms/', views.room_create, name='hostel_room_create'),
    path('<int:hostel_id>/allocate/', views.room_allocate, name='hostel_room_allocate'),
]
