from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from apps.core.users.audit import log_audit_event
from apps.core.users.decorators import role_required
from apps.core.utils.actions import action_failure, action_success, form_errors, json_action, request_data

from .forms import AdminRegistrationForm, StaffCreateForm, StaffFilterForm, StaffUpdateForm
from .models import Administrator, Teacher
from .services import (
    admin_self_register,
    create_staff_account,
    delete_teacher,
    get_assignable_teachers,
    get_staff,
    get_teacher_for_user,
    get_teacher_profile_details,
    get_teachers,
    update_staff,
)


def _staff_profile(doc_id):
    profile = Teacher.objects.filter(doc_id=doc_id).first() or Administrator.objects.filter(doc_id=doc_id).first()
    if profile is None:
        raise Teacher.DoesNotExist('Staff member not found.')
    return profile


@require_GET
@role_required('admin')
@json_action
def staff_list(request):
    form = StaffFilterForm(request.GET)
    if not form.is_valid():
        return action_failure(form_errors(form))
    return action_success(
        staff=get_staff(
            role=form.cleaned_data['role'],
            department=form.cleaned_data['department'],
            status=form.cleaned_data['status'],
        ),
    )


@require_GET
@role_required('admin')
@json_action
def teacher_list(request):
    form = StaffFilterForm(request.GET)
    if not form.is_valid():
        return action_failure(form_errors(form))
    return action_success(
        teachers=get_teachers(department=form.cleaned_data['department'], status=form.cleaned_data['status']),
    )


@require_GET
@role_required('admin')
@json_action
def assignable_teachers(request):
    form = StaffFilterForm(request.GET)
    if not form.is_valid():
        return action_failure(form_errors(form))
    return action_success(teachers=get_assignable_teachers(program=form.cleaned_data['program']))


@require_POST
@role_required('admin')
@json_action
def staff_create(request):
    form = StaffCreateForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    result = create_staff_account(**form.cleaned_data)
    profile = result['profile']
    log_audit_event(request, 'staff.created', target=profile.staff_id, details=profile.ROLE)
    return action_success(
        f"{profile.name} created with ID {result['staff_id']}.",
        status=201,
        staff_id=result['staff_id'],
        initial_password=result['initial_password'],
    )


@require_POST
@json_action
def admin_register(request):
    form = AdminRegistrationForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    profile = admin_self_register(**form.cleaned_data)
    return action_success('Administrator account created.', status=201, staff_id=profile.staff_id)


@require_GET
@role_required('admin')
@json_action
def staff_detail(request, doc_id):
    profile = _staff_profile(doc_id)
    if isinstance(profile, Teacher):
        return action_success(staff=get_teacher_profile_details(profile))
    return action_success(staff=profile.as_profile())


@require_POST
@role_required('admin')
@json_action
def staff_update(request, doc_id):
    profile = _staff_profile(doc_id)
    form = StaffUpdateForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    profile = update_staff(profile=profile, **form.changes())
    log_audit_event(request, 'staff.updated', target=profile.staff_id, details=', '.join(form.fields))
    return action_success('Staff member updated.')


@require_POST
@role_required('admin')
@json_action
def teacher_delete(request, doc_id):
    teacher = get_object_or_404(Teacher, doc_id=doc_id)
    staff_id = teacher.staff_id
    delete_teacher(teacher=teacher)
    log_audit_event(request, 'teacher.deleted', target=staff_id)
    return action_success(f"Teacher {staff_id} deleted.")


@require_GET
@role_required('teacher')
@json_action
def my_profile(request):
    return action_success(staff=get_teacher_profile_details(get_teacher_for_user(request.user)))
