from django.urls import path

from . import views

urlpatterns = [
    path('', views.room_list, name='chat_room_list'),
    path('manage/', views.chat_management, name='chat_management'),
    path('manage/<int:class_id>/sync/', views.class_room_sync, name='chat_class_room_sync'),
    path('<int:room_id>/messages/', views.room_messages, name='chat_room_messages'),
    path('<int:room_id>/messages/post/', views.room_post_message, name='chat_room_post_message'),
    path('<int:room_id>/participants/', views.room_participants, name='chat_room_participants'),
]
