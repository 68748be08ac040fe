from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from apps.core.academics.models import CollegeClass
from apps.core.students.services import get_student_for_user
from apps.core.users.audit import log_audit_event
from apps.core.users.decorators import role_required
from apps.core.utils.actions import action_failure, action_success, form_errors, json_action, request_data

from .forms import AttendanceReportForm, AttendanceSlotForm, entries_from_data
from .services import (
    aggregated_attendance_csv,
    get_aggregated_attendance,
    get_attendance_for_slot,
    get_student_attendance_details,
    import_attendance_records,
    save_attendance,
)


def _class_for_user(user, class_id):
    college_class = get_object_or_404(CollegeClass.objects.select_related('course'), pk=class_id)
    if user.role == 'teacher' and college_class.teacher_id != user.pk:
        return None
    return college_class


@require_GET
@role_required('admin')
@json_action
def attendance_report(request):
    form = AttendanceReportForm(request.GET)
    if not form.is_valid():
        return action_failure(form_errors(form))
    return action_success(report=get_aggregated_attendance(limit=form.cleaned_data['limit']))


@require_GET
@role_required('admin')
@json_action
def attendance_report_csv(request):
    report = get_aggregated_attendance()
    response = HttpResponse(aggregated_attendance_csv(report), content_type='text/csv')
    response['Content-Disposition'] = 'attachment; filename="attendance_summary.csv"'
    return response


@require_POST
@role_required('admin')
@json_action
def attendance_import(request):
    data = request_data(request)
    rows = data.get('rows') if hasattr(data, 'get') else None
    if not isinstance(rows, list):
        return action_failure('Expected a JSON body with a "rows" list.')

    result = import_attendance_records(rows=rows)
    log_audit_event(request, 'attendance.imported', details=f"Created={result['created']} Skipped={result['skipped']}")
    return action_success(f"Imported {result['created']} attendance records.", **result)


@require_GET
@role_required(['teacher', 'admin'])
@json_action
def attendance_slot(request, class_id):
    college_class = _class_for_user(request.user, class_id)
    if college_class is None:
        return action_failure('You are not assigned to this class.', status=403)

    form = AttendanceSlotForm(request.GET)
    if not form.is_valid():
        return action_failure(form_errors(form))
    return action_success(
        students=get_attendance_for_slot(
            college_class=college_class,
            date=form.cleaned_data['date'],
            period=form.cleaned_data['period'],
        ),
    )


@require_POST
@role_required(['teacher', 'admin'])
@json_action
def attendance_save(request, class_id):
    college_class = _class_for_user(request.user, class_id)
    if college_class is None:
        return action_failure('You are not assigned to this class.', status=403)

    data = request_data(request)
    form = AttendanceSlotForm(data)
    if not form.is_valid():
        return action_failure(form_errors(form))

    saved = save_attendance(
        college_class=college_class,
        marked_by=request.user,
        date=form.cleaned_data['date'],
        period=form.cleaned_data['period'],
        entries=entries_from_data(data),
    )
    return action_success(f"Attendance saved for {saved} students.", saved=saved)


@require_GET
@role_required('student')
@json_action
def my_attendance(request):
    student = get_student_for_user(request.user)
    return action_success(attendance=get_student_attendance_details(student))
