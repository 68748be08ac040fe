from django.views.decorators.http import require_GET, require_POST

from apps.core.users.decorators import authenticated_required
from apps.core.utils.actions import action_failure, action_success, form_errors, json_action, request_data

from .forms import MarkReadForm
from .services import get_notifications_for_user, mark_notifications_read


@require_GET
@authenticated_required
@json_action
def notification_list(request):
    unread_only = str(request.GET.get('unread', '')).lower() in {'1', 'true', 'yes', 'on'}
    return action_success(
        notifications=get_notifications_for_user(request.user, unread_only=unread_only),
    )


@require_POST
@authenticated_required
@json_action
def notification_mark_read(request):
    form = MarkReadForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    updated = mark_notifications_read(user=request.user, ids=form.cleaned_data['ids'])
    return action_success(f"{updated} notification(s) marked as read.", updated=updated)
