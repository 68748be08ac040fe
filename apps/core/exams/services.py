from __future__ import annotations

import logging
import math
from decimal import Decimal, ROUND_HALF_UP

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from apps.core.academics.models import CollegeClass, Course
from apps.core.attendance.services import student_attendance_percentage
from apps.core.fees.models import FeeLedger
from apps.core.notifications.services import notify_uids
from apps.core.students.models import Student
from apps.core.utils.documents import build_document_page, image_to_pdf_bytes

from .models import Backlog, ExamSchedule, HallTicket, Mark

logger = logging.getLogger(__name__)

GRADE_POINTS = {
    'O': 10,
    'A+': 9,
    'A': 8,
    'B+': 7,
    'B': 6,
    'C+': 5,
    'C': 4,
    'P': 3,
    'F': 0,
    'FAIL': 0,
}
FAIL_GRADES = {'F', 'FAIL'}
DEFAULT_ATTENDANCE_PERCENTAGE = 100


class HallTicketBlocked(ValidationError):
    """The student fails the live fee or attendance check."""


def _to_decimal(value) -> Decimal:
    return Decimal(str(value or '0'))


def _quantize(value) -> Decimal:
    return _to_decimal(value).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


def _marks(value):
    if value in (None, ''):
        return None
    marks = _quantize(value)
    if marks < 0:
        raise ValidationError('Marks cannot be negative.')
    return marks


def normalize_grade(grade):
    return (grade or '').strip().upper()


def grade_point(grade):
    return GRADE_POINTS.get(normalize_grade(grade))


def academic_year_for_semester(semester) -> int:
    semester = int(semester)
    if semester < 1:
        raise ValidationError('Semester must be 1 or greater.')
    return math.ceil(semester / 2)


def exam_as_dict(exam: ExamSchedule):
    return {
        'id': exam.pk,
        'exam_session_name': exam.exam_session_name,
        'course_code': exam.course_code,
        'course_name': exam.course_name,
        'program': exam.program,
        'branch': exam.branch,
        'year': exam.year,
        'semester': exam.semester,
        'date': exam.date,
        'start_time': exam.start_time,
        'end_time': exam.end_time,
        'room': exam.room,
        'status': exam.status,
    }


def _is_malformed(exam: ExamSchedule):
    return not (exam.date and exam.start_time and exam.course_code)


def get_exam_schedules(*, program=None, branch=None, year=None, semester=None, status=None):
    exams = ExamSchedule.objects.for_cohort(program=program, branch=branch, year=year)
    if semester:
        exams = exams.filter(semester=semester)
    if status:
        exams = exams.filter(status=status)

    rows = []
    skipped = 0
    for exam in exams:
        if _is_malformed(exam):
            skipped += 1
            logger.warning('Skipping exam schedule %s with missing date, time or course code.', exam.pk)
            continue
        rows.append(exam_as_dict(exam))
    if skipped:
        logger.info('Exam schedule listing skipped %s malformed rows.', skipped)
    return rows


def _validate_times(start_time, end_time):
    if start_time and end_time and end_time <= start_time:
        raise ValidationError('Exam end time must be after the start time.')


@transaction.atomic
def save_exam_schedule(*, exam=None, exam_session_name, course: Course, year, date, start_time, end_time, room='', status=ExamSchedule.STATUS_SCHEDULED):
    if not (exam_session_name or '').strip():
        raise ValidationError('Exam session name is required.')
    _validate_times(start_time, end_time)

    exam = exam or ExamSchedule()
    exam.exam_session_name = exam_session_name.strip()
    exam.course = course
    exam.course_code = course.course_id
    exam.course_name = course.name
    exam.program = course.program
    exam.branch = course.branch
    exam.year = year
    exam.semester = course.semester
    exam.date = date
    exam.start_time = start_time
    exam.end_time = end_time
    exam.room = room or ''
    exam.status = status
    exam.save()
    return exam


def delete_exam_schedule(exam: ExamSchedule):
    exam.delete()


def _exam_snapshot(exam: ExamSchedule):
    return {
        'course_code': exam.course_code,
        'course_name': exam.course_name,
        'date': exam.date.isoformat() if exam.date else None,
        'start_time': exam.start_time.strftime('%H:%M') if exam.start_time else None,
        'end_time': exam.end_time.strftime('%H:%M') if exam.end_time else None,
        'room': exam.room,
    }


@transaction.atomic
def schedule_exams_and_setup_hall_tickets(
    *,
    exam_session_name,
    program,
    branch,
    year,
    semester,
    exams,
    min_attendance=Decimal('75.00'),
    max_dues=Decimal('0.00'),
):
    """Create an exam session's schedule and a hall ticket for every active student in the cohort.

    ``exams`` is a list of dicts with ``course_id``, ``date``, ``start_time``,
    ``end_time`` and optionally ``room``. Students are notified once the
    transaction commits.
    """
    exam_session_name = (exam_session_name or '').strip()
    if not exam_session_name:
        raise ValidationError('Exam session name is required.')
    if not exams:
        raise ValidationError('Add at least one exam to the schedule.')

    for entry in exams:
        if not (entry.get('date') and entry.get('start_time') and entry.get('end_time')):
            raise ValidationError('Every exam needs a date, a start time and an end time.')

    course_ids = [entry.get('course_id') for entry in exams]
    courses = {course.course_id: course for course in Course.objects.filter(course_id__in=course_ids)}
    missing = sorted({course_id for course_id in course_ids if course_id not in courses}, key=str)
    if missing:
        raise ValidationError(f"Unknown courses: {', '.join(map(str, missing))}.")

    created = []
    for entry in exams:
        created.append(
            save_exam_schedule(
                exam_session_name=exam_session_name,
                course=courses[entry['course_id']],
                year=year,
                date=entry.get('date'),
                start_time=entry.get('start_time'),
                end_time=entry.get('end_time'),
                room=entry.get('room', ''),
            )
        )

    snapshot = [_exam_snapshot(exam) for exam in sorted(created, key=lambda item: (item.date, item.start_time))]
    students = list(
        Student.objects.for_cohort(program=program, branch=branch, year=year)
        .filter(status=Student.STATUS_ACTIVE)
        .select_related('user')
    )
    for student in students:
        HallTicket.objects.update_or_create(
            student=student,
            semester=semester,
            defaults={
                'exam_session_name': exam_session_name,
                'college_id': student.college_id,
                'student_name': student.name,
                'program': student.program,
                'branch': student.branch,
                'year': student.year,
                'exams': snapshot,
                'min_attendance': _quantize(min_attendance),
                'max_dues': _quantize(max_dues),
            },
        )

    uids = [student.user.uid for student in students if student.user_id]
    if uids:
        notify_uids(
            uids,
            title='Exam Schedule Published',
            message=f"The {exam_session_name} schedule is out. Your hall ticket is available.",
            type='event',
            link='/student/exams',
        )
    logger.info(
        'Scheduled %s exams and %s hall tickets for %s %s year %s.',
        len(created),
        len(students),
        program,
        branch,
        year,
    )
    return {'exams': len(created), 'hall_tickets': len(students)}


def get_student_exam_schedules(student: Student):
    exams = ExamSchedule.objects.for_cohort(
        program=student.program,
        branch=student.branch,
        year=student.year,
    ).filter(status=ExamSchedule.STATUS_SCHEDULED).order_by('-date', 'start_time')
    return [exam_as_dict(exam) for exam in exams if not _is_malformed(exam)]


def _eligibility(student: Student, ticket: HallTicket):
    ledger = FeeLedger.objects.filter(student=student).first()
    balance = _quantize(ledger.balance) if ledger else Decimal('0.00')
    attendance = student_attendance_percentage(student)
    if attendance is None:
        attendance = DEFAULT_ATTENDANCE_PERCENTAGE

    reasons = []
    if balance > ticket.max_dues:
        reasons.append(f"You have outstanding fees of INR {balance}. Please clear your dues.")
    if Decimal(attendance) < ticket.min_attendance:
        reasons.append(
            f"Your attendance is {attendance}%, below the required {ticket.min_attendance}%."
        )
    return {'fee_balance': balance, 'attendance_percentage': attendance}, reasons


def get_hall_ticket(*, student: Student, semester=None):
    """Hall ticket for the semester; eligibility is re-checked against live fees and attendance."""
    semester = semester or student.semester
    ticket = HallTicket.objects.filter(student=student, semester=semester).first()
    if ticket is None:
        raise ValidationError(f"No hall ticket has been generated for semester {semester}.")

    eligibility, reasons = _eligibility(student, ticket)
    if reasons:
        raise HallTicketBlocked(reasons)

    return {
        'ticket_id': f"{student.doc_id}_{ticket.semester}",
        'exam_session_name': ticket.exam_session_name,
        'college_id': ticket.college_id,
        'student_name': ticket.student_name,
        'program': ticket.program,
        'branch': ticket.branch,
        'year': ticket.year,
        'semester': ticket.semester,
        'academic_year': academic_year_for_semester(ticket.semester),
        'exams': ticket.exams,
        'eligibility': eligibility,
        'generated_at': ticket.generated_at,
    }


def build_hall_ticket_image(hall_ticket):
    return build_document_page(
        'College ERP - Hall Ticket',
        [
            f"Ticket: {hall_ticket['ticket_id']}",
            f"Session: {hall_ticket['exam_session_name']}",
            f"Student: {hall_ticket['student_name']} ({hall_ticket['college_id']})",
            f"Program: {hall_ticket['program']} / {hall_ticket['branch']}",
            f"Year {hall_ticket['academic_year']}, Semester {hall_ticket['semester']}",
        ],
        table_header=['Course', 'Date', 'Time', 'Room'],
        table_rows=[
            [
                f"{exam['course_code']} {exam['course_name']}",
                exam['date'] or '-',
                f"{exam['start_time'] or '-'} - {exam['end_time'] or '-'}",
                exam['room'] or '-',
            ]
            for exam in hall_ticket['exams']
        ],
        footer_lines=['Carry this hall ticket and your college ID card to every exam.'],
    )


def generate_hall_ticket_pdf(*, student: Student, semester=None) -> bytes:
    hall_ticket = get_hall_ticket(student=student, semester=semester)
    return image_to_pdf_bytes([build_hall_ticket_image(hall_ticket)])


def _ensure_can_grade(user, college_class: CollegeClass):
    if user.role == 'admin':
        return
    if college_class.teacher_id != user.pk:
        raise ValidationError('You are not assigned to this class.')


@transaction.atomic
def save_marks_for_class(*, college_class: CollegeClass, recorded_by, entries):
    """Upsert marks for students on the class roster.

    ``entries`` holds dicts with ``student_id`` (document id), ``grade`` and
    optional ``internal_marks``/``external_marks``. A fail grade opens a
    backlog for the course; a later pass clears it.
    """
    _ensure_can_grade(recorded_by, college_class)
    if not entries:
        raise ValidationError('No marks were submitted.')

    roster_ids = set(college_class.students.values_list('pk', flat=True))
    doc_ids = [entry.get('student_id') for entry in entries]
    students = {
        student.doc_id: student
        for student in Student.objects.filter(doc_id__in=doc_ids, user_id__in=roster_ids).select_related('user')
    }
    unknown = sorted({doc_id for doc_id in doc_ids if doc_id not in students}, key=str)
    if unknown:
        raise ValidationError(f"Students not enrolled in this class: {', '.join(map(str, unknown))}.")

    course = college_class.course
    now = timezone.now()
    saved = []
    for entry in entries:
        grade = normalize_grade(entry.get('grade'))
        if grade not in GRADE_POINTS:
            raise ValidationError(f"Invalid grade: {entry.get('grade')!r}.")
        internal = _marks(entry.get('internal_marks'))
        external = _marks(entry.get('external_marks'))
        total = internal + external if internal is not None and external is not None else None

        student = students[entry['student_id']]
        Mark.objects.update_or_create(
            student=student,
            course=course,
            defaults={
                'college_class': college_class,
                'semester': college_class.semester,
                'internal_marks': internal,
                'external_marks': external,
                'total_marks': total,
                'grade': grade,
                'credits': course.credits,
                'recorded_by': recorded_by,
            },
        )

        if grade in FAIL_GRADES:
            Backlog.objects.update_or_create(
                student=student,
                course=course,
                defaults={'semester': college_class.semester, 'status': Backlog.STATUS_ACTIVE, 'cleared_at': None},
            )
        else:
            Backlog.objects.filter(student=student, course=course, status=Backlog.STATUS_ACTIVE).update(
                status=Backlog.STATUS_CLEARED,
                cleared_at=now,
            )
        saved.append(student)

    uids = [student.user.uid for student in saved if student.user_id]
    if uids:
        notify_uids(
            uids,
            title='Marks Published',
            message=f"Your marks for {course.name} have been published.",
            type='info',
            link='/student/results',
        )
    return len(saved)


def mark_as_dict(mark: Mark):
    return {
        'student_id': mark.student.doc_id,
        'college_id': mark.student.college_id,
        'student_name': mark.student.name,
        'course_id': mark.course.course_id,
        'course_name': mark.course.name,
        'semester': mark.semester,
        'internal_marks': mark.internal_marks,
        'external_marks': mark.external_marks,
        'total_marks': mark.total_marks,
        'grade': mark.grade,
        'grade_point': grade_point(mark.grade),
        'credits': mark.credits,
    }


def get_marks_records(*, student=None, college_class=None, semester=None):
    marks = Mark.objects.select_related('student', 'course')
    if student is not None:
        marks = marks.filter(student=student)
    if college_class is not None:
        marks = marks.filter(course=college_class.course, student__user__in=college_class.students.all())
    if semester:
        marks = marks.filter(semester=semester)
    return [mark_as_dict(mark) for mark in marks.order_by('semester', 'course__course_id')]


def get_marks_for_class(college_class: CollegeClass):
    """Existing marks of a class roster keyed by student document id, for pre-filling mark entry."""
    marks = Mark.objects.filter(
        course=college_class.course,
        student__user__in=college_class.students.all(),
    ).select_related('student')
    return {
        mark.student.doc_id: {
            'record_id': mark.pk,
            'internal_marks': mark.internal_marks,
            'external_marks': mark.external_marks,
            'total_marks': mark.total_marks,
            'grade': mark.grade,
        }
        for mark in marks
    }


def calculate_cgpa(student: Student):
    """Credit-weighted grade point average over all graded courses, or None before any results."""
    weighted = Decimal('0')
    credits_total = 0
    for grade, credits in Mark.objects.filter(student=student).values_list('grade', 'credits'):
        point = grade_point(grade)
        if point is None or not credits:
            continue
        weighted += Decimal(point) * credits
        credits_total += credits
    if not credits_total:
        return None
    return _quantize(weighted / credits_total)


def fetch_student_backlogs(student: Student, *, status=Backlog.STATUS_ACTIVE):
    backlogs = Backlog.objects.filter(student=student).select_related('course')
    if status:
        backlogs = backlogs.filter(status=status)
    return [
        {
            'course_id': backlog.course.course_id,
            'course_name': backlog.course.name,
            'semester': backlog.semester,
            'status': backlog.status,
            'cleared_at': backlog.cleared_at,
        }
        for backlog in backlogs
    ]
