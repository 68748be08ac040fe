from django.urls import path

from .views import (
    login_view,
    logout_view,
    notification_preferences_view,
    password_reset_view,
    profile_view,
    settings_view,
)

urlpatterns = [
    path('login/', login_view, name='login'),
    path('logout/', logout_view, name='logout'),
    path('profile/', profile_view, name='user_profile'),
    path('password-reset/', password_reset_view, name='password_reset'),
    path('settings/', settings_view, name='user_settings'),
    path('settings/notifications/', notification_preferences_view, name='notification_preferences'),
]
