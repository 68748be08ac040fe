"""Dashboard payloads.

Each dashboard is assembled from independent blocks. A block that raises is
logged and reported as ``None`` (its name added to ``unavailable``) so one bad
query never blanks the whole dashboard.
"""
import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count

from apps.core.academics.models import CollegeClass, Course
from apps.core.academics.services import build_weekly_schedule, get_teacher_classes
from apps.core.attendance.services import get_attendance_trend, student_attendance_percentage
from apps.core.exams.services import calculate_cgpa, fetch_student_backlogs, get_student_exam_schedules
from apps.core.fees.services import get_fee_summary, get_student_fee_details
from apps.core.hostels.models import Complaint, Hostel
from apps.core.notifications.services import get_notifications_for_user
from apps.core.staff.models import Teacher
from apps.core.students.models import Student
from apps.core.users.models import AuditLog, Identity

logger = logging.getLogger(__name__)

RECENT_LOGIN_LIMIT = 10


def _collect(blocks):
    data = {}
    unavailable = []
    for name, build in blocks:
        try:
            with transaction.atomic():
                data[name] = build()
        except Exception:
            logger.exception('Dashboard block %s failed.', name)
            data[name] = None
            unavailable.append(name)
    data['unavailable'] = unavailable
    return data


def _admin_counts():
    return {
        'students': Student.objects.filter(status=Student.STATUS_ACTIVE).count(),
        'pending_students': Student.objects.filter(status=Student.STATUS_PENDING_APPROVAL).count(),
        'teachers': Teacher.objects.count(),
        'courses': Course.objects.count(),
        'classes': CollegeClass.objects.count(),
        'hostels': Hostel.objects.count(),
        'open_complaints': Complaint.objects.exclude(status=Complaint.STATUS_RESOLVED).count(),
    }


def _branch_distribution():
    rows = (
        Student.objects.filter(status=Student.STATUS_ACTIVE)
        .values('program', 'branch')
        .annotate(total=Count('id'))
        .order_by('program', 'branch')
    )
    return [{'program': row['program'], 'branch': row['branch'], 'students': row['total']} for row in rows]


def _recent_logins():
    logs = AuditLog.objects.filter(action='user.login').select_related('user')[:RECENT_LOGIN_LIMIT]
    names = dict(
        Identity.objects.filter(user__in=[log.user_id for log in logs if log.user_id]).values_list('user_id', 'name')
    )
    return [
        {
            'name': names.get(log.user_id) or (log.user.email if log.user_id else 'Unknown'),
            'role': log.user.role if log.user_id else '',
            'ip_address': log.ip_address,
            'timestamp': log.created_at,
        }
        for log in logs
    ]


def get_admin_dashboard_data():
    return _collect([
        ('counts', _admin_counts),
        ('branch_distribution', _branch_distribution),
        ('fees', get_fee_summary),
        ('attendance_trend', lambda: get_attendance_trend(months=6)),
        ('recent_logins', _recent_logins),
    ])


def _student_fees(student):
    try:
        return get_student_fee_details(student)
    except ValidationError:
        return None


def get_student_dashboard_data(student: Student):
    return _collect([
        ('profile', student.as_profile),
        ('attendance_percentage', lambda: student_attendance_percentage(student)),
        ('attendance_trend', lambda: get_attendance_trend(months=6, student=student)),
        ('cgpa', lambda: calculate_cgpa(student)),
        ('backlogs', lambda: fetch_student_backlogs(student)),
        ('fees', lambda: _student_fees(student)),
        ('upcoming_exams', lambda: get_student_exam_schedules(student)[:5]),
        ('notifications', lambda: get_notifications_for_user(student.user, limit=5) if student.user_id else []),
    ])


def _teacher_schedule(teacher_user):
    classes = CollegeClass.objects.filter(teacher=teacher_user).select_related('course')
    return build_weekly_schedule(list(classes))


def _teacher_student_count(teacher_user):
    return get_user_model().objects.filter(enrolled_classes__teacher=teacher_user).distinct().count()


def get_teacher_dashboard_data(teacher_user):
    return _collect([
        ('classes', lambda: get_teacher_classes(teacher_user)),
        ('student_count', lambda: _teacher_student_count(teacher_user)),
        ('schedule', lambda: _teacher_schedule(teacher_user)),
        ('notifications', lambda: get_notifications_for_user(teacher_user, limit=5)),
    ])
