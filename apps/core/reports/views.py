from django.views.decorators.http import require_GET

from apps.core.students.services import get_student_for_user
from apps.core.users.decorators import role_required
from apps.core.utils.actions import action_success, json_action

from .services import get_admin_dashboard_data, get_student_dashboard_data, get_teacher_dashboard_data


@require_GET
@role_required('admin')
@json_action
def admin_dashboard(request):
    return action_success(dashboard=get_admin_dashboard_data())


@require_GET
@role_required('teacher')
@json_action
def teacher_dashboard(request):
    return action_success(dashboard=get_teacher_dashboard_data(request.user))


@require_GET
@role_required('student')
@json_action
def student_dashboard(request):
    return action_success(dashboard=get_student_dashboard_data(get_student_for_user(request.user)))
