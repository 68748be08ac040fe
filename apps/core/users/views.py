from django.contrib.auth import authenticate, login, logout
from django.views.decorators.http import require_GET, require_POST

from apps.core.utils.actions import action_failure, action_success, form_errors, json_action, request_data

from .decorators import authenticated_required
from .forms import LoginForm, NotificationPreferencesForm, PasswordResetRequestForm
from .services import (
    get_user_profile_on_login,
    get_user_settings,
    send_password_reset_link,
    update_notification_preferences,
)


@require_POST
@json_action
def login_view(request):
    form = LoginForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    user = authenticate(
        request,
        username=form.cleaned_data['email'].lower(),
        password=form.cleaned_data['password'],
    )
    if user is None:
        return action_failure('Invalid email or password.', status=401)

    login(request, user)
    return action_success('Logged in.', profile=get_user_profile_on_login(user=user))


@require_POST
def logout_view(request):
    logout(request)
    return action_success('Logged out.')


@require_GET
@authenticated_required
@json_action
def profile_view(request):
    return action_success(profile=get_user_profile_on_login(user=request.user))


@require_POST
@json_action
def password_reset_view(request):
    form = PasswordResetRequestForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    send_password_reset_link(email=form.cleaned_data['email'])
    return action_success('If an account exists for that email, a password reset link has been sent.')


@require_GET
@authenticated_required
@json_action
def settings_view(request):
    return action_success(settings=get_user_settings(request.user))


@require_POST
@authenticated_required
@json_action
def notification_preferences_view(request):
    form = NotificationPreferencesForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    enabled = update_notification_preferences(user=request.user, enabled=form.cleaned_data['enabled'])
    return action_success('Notification preferences updated.', notifications_enabled=enabled)
