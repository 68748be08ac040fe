from django.urls import path

from . import views

urlpatterns = [
    path('create/', views.opportunity_create, name='opportunity_create'),
    path('me/applications/', views.my_applications, name='placement_my_applications'),
    path('applications/<int:application_id>/status/', views.application_update_status, name='placement_application_status'),
    path('list/<str:type>/', views.opportunity_list, name='opportunity_list'),
    path('<int:opportunity_id>/update/', views.opportunity_update, name='opportunity_update'),
    path('<int:opportunity_id>/delete/', views.opportunity_delete, name='opportunity_delete'),
    path('<int:opportunity_id>/apply/', views.opportunity_apply, name='opportunity_apply'),
    path('<int:opportunity_id>/applications/', views.opportunity_applications, name='opportunity_applications'),
]
