from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from apps.core.academics.models import CollegeClass
from apps.core.students.services import get_student_for_user
from apps.core.users.audit import log_audit_event
from apps.core.users.decorators import role_required
from apps.core.utils.actions import action_failure, action_success, form_errors, json_action, request_data

from .forms import ExamFilterForm, ExamScheduleForm, ExamSessionForm, HallTicketQueryForm, clean_exam_entries
from .models import ExamSchedule
from .services import (
    HallTicketBlocked,
    calculate_cgpa,
    delete_exam_schedule,
    fetch_student_backlogs,
    generate_hall_ticket_pdf,
    get_exam_schedules,
    get_hall_ticket,
    get_marks_for_class,
    get_marks_records,
    get_student_exam_schedules,
    save_exam_schedule,
    save_marks_for_class,
    schedule_exams_and_setup_hall_tickets,
)


@require_GET
@role_required(['admin', 'teacher'])
@json_action
def exam_list(request):
    form = ExamFilterForm(request.GET)
    if not form.is_valid():
        return action_failure(form_errors(form))
    return action_success(exams=get_exam_schedules(**form.cleaned_data))


@require_POST
@role_required('admin')
@json_action
def exam_save(request, exam_id=None):
    exam = get_object_or_404(ExamSchedule, pk=exam_id) if exam_id else None
    form = ExamScheduleForm(request_data(request))
    if not form.is_valid():
        return action_failure(form_errors(form))

    data = dict(form.cleaned_data)
    data['status'] = data['status'] or ExamSchedule.STATUS_SCHEDULED
    exam = save_exam_schedule(exam=exam, **data)
    return action_success('Exam saved.', exam_id=exam.pk)


@require_POST
@role_required('admin')
@json_action
def exam_delete(request, exam_id):
    delete_exam_schedule(get_object_or_404(ExamSchedule, pk=exam_id))
    return action_success('Exam deleted.')


@require_POST
@role_required('admin')
@json_action
def exam_session_publish(request):
    data = request_data(request)
    form = ExamSessionForm(data)
    if not form.is_valid():
        return action_failure(form_errors(form))
    entries, error = clean_exam_entries(data.get('exams'))
    if error:
        return action_failure(error)

    result = schedule_exams_and_setup_hall_tickets(exams=entries, **form.cleaned_data)
    log_audit_event(request, 'exams.published', target=form.cleaned_data['exam_session_name'], details=str(result))
    return action_success(
        f"Scheduled {result['exams']} exams and generated {result['hall_tickets']} hall tickets.",
        status=201,
        **result,
    )


@require_POST
@role_required(['teacher', 'admin'])
@json_action
def marks_save(request, class_id):
    college_class = get_object_or_404(CollegeClass.objects.select_related('course'), pk=class_id)
    entries = request_data(request).get('marks')
    if not isinstance(entries, list):
        return action_failure('Expected a JSON body with a "marks" list.')

    saved = save_marks_for_class(college_class=college_class, recorded_by=request.user, entries=entries)
    return action_success(f"Saved marks for {saved} students.", saved=saved)


@require_GET
@role_required(['teacher', 'admin'])
@json_action
def marks_for_class(request, class_id):
    college_class = get_object_or_404(CollegeClass.objects.select_related('course'), pk=class_id)
    if request.user.role == 'teacher' and college_class.teacher_id != request.user.pk:
        return action_failure('You are not assigned to this class.', status=403)
    return action_success(
        marks=get_marks_records(college_class=college_class),
        entries=get_marks_for_class(college_class),
    )


@require_GET
@role_required('student')
@json_action
def my_exams(request):
    return action_success(exams=get_student_exam_schedules(get_student_for_user(request.user)))


@require_GET
@role_required('student')
@json_action
def my_results(request):
    student = get_student_for_user(request.user)
    return action_success(
        marks=get_marks_records(student=student),
        cgpa=calculate_cgpa(student),
        backlogs=fetch_student_backlogs(student),
    )


@require_GET
@role_required('student')
@json_action
def my_hall_ticket(request):
    form = HallTicketQueryForm(request.GET)
    if not form.is_valid():
        return action_failure(form_errors(form))

    student = get_student_for_user(request.user)
    try:
        hall_ticket = get_hall_ticket(student=student, semester=form.cleaned_data['semester'])
    except HallTicketBlocked as exc:
        return action_failure(' '.join(exc.messages), status=403)
    return action_success(hall_ticket=hall_ticket)


@require_GET
@role_required('student')
@json_action
def my_hall_ticket_pdf(request):
    form = HallTicketQueryForm(request.GET)
    if not form.is_valid():
        return action_failure(form_errors(form))

    student = get_student_for_user(request.user)
    try:
        pdf_bytes = generate_hall_ticket_pdf(student=student, semester=form.cleaned_data['semester'])
    except HallTicketBlocked as exc:
        return action_failure(' '.join(exc.messages), status=403)

    response = HttpResponse(pdf_bytes, content_type='application/pdf')
    response['Content-Disposition'] = f'attachment; filename="hall_ticket_{student.college_id}.pdf"'
    return response
