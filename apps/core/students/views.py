from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from apps.core.users.audit import log_audit_event
from apps.core.users.decorators import role_required
from apps.core.utils.actions import action_failure, action_success, form_errors, json_action, request_data

from .forms import CohortFilterForm, StudentCreateForm, StudentRegistrationForm, StudentUpdateForm
from .models import Student
from .services import (
    create_student_account,
    delete_student,
    get_sections_for_branch,
    get_student_enrolled_courses,
    get_student_for_user,
    get_student_performance_data,
    get_student_profile_details,
    get_student_profile_for_teacher,
    get_student_schedule,
    get_students,
    get_students_for_section,
    student_self_register,
    update_student,
)


@require_GET
@role_required('admin')
@json_action
def student_list(request):
    form = CohortFilterForm(request.GET)
    if not form.is_valid():
        return action_failure(form_errors(form))
    return action_success(students=get_students(**form.cleaned_data))


@require_POST
@role_required('admin')
@json_action
def student_create(request):
    form = StudentCreateForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    result = create_student_account(**form.service_kwargs())
    student = result['student']
    log_audit_event(request, 'student.created', target=student.college_id)
    return action_success(
        f"Student {student.name} created with ID {result['college_id']}.",
        status=201,
        student_id=student.doc_id,
        college_id=result['college_id'],
        initial_password=result['initial_password'],
    )


@require_POST
@json_action
def student_register(request):
    form = StudentRegistrationForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    student = student_self_register(**form.cleaned_data)
    return action_success(
        'Registration submitted. You can sign in once an administrator approves your account.',
        status=201,
        college_id=student.college_id,
    )


@require_GET
@role_required('admin')
@json_action
def student_detail(request, doc_id):
    student = get_object_or_404(Student, doc_id=doc_id)
    return action_success(student=get_student_profile_details(student))


@require_POST
@role_required('admin')
@json_action
def student_update(request, doc_id):
    student = get_object_or_404(Student, doc_id=doc_id)
    form = StudentUpdateForm(request_data(request), instance=student)
    if not form.is_valid():
        return action_failure(form_errors(form))

    student = update_student(student=student, **form.changes())
    log_audit_event(request, 'student.updated', target=student.college_id, details=', '.join(form.fields))
    return action_success('Student updated.', college_id=student.college_id)


@require_POST
@role_required('admin')
@json_action
def student_delete(request, doc_id):
    student = get_object_or_404(Student, doc_id=doc_id)
    college_id = student.college_id
    delete_student(student=student)
    log_audit_event(request, 'student.deleted', target=college_id)
    return action_success(f"Student {college_id} deleted.")


@require_GET
@role_required('teacher')
@json_action
def student_profile_for_teacher(request, doc_id):
    student = get_object_or_404(Student, doc_id=doc_id)
    return action_success(student=get_student_profile_for_teacher(teacher_user=request.user, student=student))


@require_GET
@role_required(['admin', 'teacher'])
@json_action
def section_list(request):
    form = CohortFilterForm(request.GET)
    if not form.is_valid():
        return action_failure(form_errors(form))
    data = form.cleaned_data
    if not data['program'] or not data['branch']:
        return action_failure('Program and branch are required.')
    return action_success(
        sections=get_sections_for_branch(program=data['program'], branch=data['branch'], year=data['year']),
    )


@require_GET
@role_required(['admin', 'teacher'])
@json_action
def section_students(request):
    form = CohortFilterForm(request.GET)
    if not form.is_valid():
        return action_failure(form_errors(form))
    data = form.cleaned_data
    if not all((data['program'], data['branch'], data['year'], data['section'])):
        return action_failure('Program, branch, year and section are required.')
    return action_success(
        students=get_students_for_section(
            program=data['program'],
            branch=data['branch'],
            year=data['year'],
            section=data['section'],
        ),
    )


@require_GET
@role_required('student')
@json_action
def my_profile(request):
    student = get_student_for_user(request.user)
    return action_success(student=get_student_profile_details(student))


@require_GET
@role_required('student')
@json_action
def my_courses(request):
    student = get_student_for_user(request.user)
    return action_success(courses=get_student_enrolled_courses(student))


@require_GET
@role_required('student')
@json_action
def my_schedule(request):
    student = get_student_for_user(request.user)
    return action_success(schedule=get_student_schedule(student))


@require_GET
@role_required('student')
@json_action
def my_performance(request):
    student = get_student_for_user(request.user)
    return action_success(performance=get_student_performance_data(student))


@require_GET
@role_required('admin')
@json_action
def student_performance(request, doc_id):
    student = get_object_or_404(Student, doc_id=doc_id)
    return action_success(performance=get_student_performance_data(student))
