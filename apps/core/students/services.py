from __future__ import annotations

import logging
import re
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, Q

from apps.core.academics.models import CollegeClass
from apps.core.academics.services import build_weekly_schedule
from apps.core.attendance.services import get_attendance_trend, student_attendance_percentage
from apps.core.exams.services import calculate_cgpa, get_marks_records
from apps.core.fees.services import create_fee_ledger, get_student_fee_details, sync_ledger_student_fields
from apps.core.hostels.models import Complaint, RoomResident
from apps.core.hostels.services import get_student_hostel_data
from apps.core.notifications.models import Notification
from apps.core.notifications.services import notify_roles
from apps.core.sequences.identifiers import (
    avatar_url_for,
    batch_year_short,
    build_identifier,
    generate_password,
    get_branch_code,
    get_program_code,
    initials_for,
    section_for_sequence,
    student_counter_key,
    student_id_prefix,
)
from apps.core.sequences.services import ensure_counter_at_least, next_sequence
from apps.core.users.identity import IdentityNotFound, get_identity_provider
from apps.core.users.models import Identity, User, new_document_id
from apps.core.users.provisioning import AlreadyRegistered, ensure_email_available, provision_account
from apps.core.users.services import sync_identity

from .models import Student

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    'name',
    'email',
    'program',
    'branch',
    'batch',
    'year',
    'semester',
    'section',
    'dob',
    'gender',
    'phone',
    'address',
    'status',
    'type',
    'emergency_contact_name',
    'emergency_contact_phone',
    'emergency_contact_address',
)
MIN_PASSWORD_LENGTH = 6
_SERIAL = re.compile(r'(\d{4})$')


def get_student_for_user(user) -> Student:
    student = Student.objects.select_related('user').filter(user=user).first()
    if student is None:
        raise ValidationError('Student profile not found for this account.')
    return student


def _student_claims(doc_id, college_id):
    return {'role': User.ROLE_STUDENT, 'student_doc_id': doc_id, 'college_id': college_id}


def _require(**values):
    missing = [field.replace('_', ' ') for field, value in values.items() if value in (None, '')]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}.")


def _provision_student(*, email, password, email_verified, student_fields, total_fees=None):
    doc_id = new_document_id()

    def write_profiles(user):
        student = Student.objects.create(doc_id=doc_id, user=user, email=user.email, **student_fields)
        create_fee_ledger(student=student, total_fees=total_fees)
        sync_identity(user=user, profile=student)
        return student

    _, student = provision_account(
        email=email,
        password=password,
        display_name=student_fields['name'],
        role=User.ROLE_STUDENT,
        build_claims=lambda user: _student_claims(doc_id, student_fields['college_id']),
        write_profiles=write_profiles,
        email_verified=email_verified,
    )
    return student


def create_student_account(
    *,
    name,
    email,
    program,
    branch,
    batch,
    dob,
    year=1,
    semester=1,
    gender='',
    phone='',
    address='',
    student_type=Student.TYPE_DAY_SCHOLAR,
    emergency_contact_name='',
    emergency_contact_phone='',
    emergency_contact_address='',
    total_fees=None,
):
    """Provision a student with a generated college id and initial password."""
    _require(name=name, email=email, program=program, branch=branch, batch=batch, date_of_birth=dob)
    name = name.strip()

    password = generate_password(name, dob)
    if not password:
        raise ValidationError('Could not generate an initial password from the name and date of birth.')

    # Fail before consuming a serial number.
    ensure_email_available(email.strip().lower())

    sequence = next_sequence(student_counter_key(student_id_prefix(program, branch, batch)))
    college_id = build_identifier(
        get_program_code(program),
        get_branch_code(program, branch),
        batch_year_short(batch),
        sequence,
    )

    student = _provision_student(
        email=email,
        password=password,
        email_verified=False,
        total_fees=total_fees,
        student_fields={
            'college_id': college_id,
            'name': name,
            'program': program,
            'branch': branch,
            'year': year,
            'semester': semester,
            'section': section_for_sequence(sequence),
            'batch': batch,
            'dob': dob,
            'gender': gender,
            'phone': phone,
            'address': address,
            'status': Student.STATUS_ACTIVE,
            'type': student_type,
            'emergency_contact_name': emergency_contact_name,
            'emergency_contact_phone': emergency_contact_phone,
            'emergency_contact_address': emergency_contact_address,
            'initials': initials_for(name),
            'avatar_url': avatar_url_for(name),
        },
    )
    logger.info('Created student %s (%s).', student.college_id, student.doc_id)
    return {'student': student, 'college_id': college_id, 'initial_password': password}


def student_self_register(*, name, email, password, college_id, program, branch, batch, year=1, semester=1, dob=None, phone=''):
    """Register with a user-chosen college id and password; an admin approves the account later."""
    _require(name=name, email=email, password=password, college_id=college_id, program=program, branch=branch, batch=batch)
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")

    college_id = college_id.strip().upper()
    if Student.objects.filter(college_id=college_id).exists():
        raise AlreadyRegistered(f"College ID {college_id} is already registered.")

    prefix = student_id_prefix(program, branch, batch)
    serial = _SERIAL.search(college_id)
    name = name.strip()

    student = _provision_student(
        email=email,
        password=password,
        email_verified=False,
        student_fields={
            'college_id': college_id,
            'name': name,
            'program': program,
            'branch': branch,
            'year': year,
            'semester': semester,
            'section': section_for_sequence(int(serial.group(1))) if serial and int(serial.group(1)) else '',
            'batch': batch,
            'dob': dob,
            'phone': phone,
            'status': Student.STATUS_PENDING_APPROVAL,
            'initials': initials_for(name),
            'avatar_url': avatar_url_for(name),
        },
    )

    # Keep generated ids from colliding with a hand-picked one in the same series.
    if serial and college_id.startswith(prefix):
        ensure_counter_at_least(student_counter_key(prefix), int(serial.group(1)))

    notify_roles(
        User.ROLE_ADMIN,
        title='New Student Registration',
        message=f"{student.name} ({student.college_id}) registered and is awaiting approval.",
        type='task',
        link='/admin/students',
    )
    return student


def _college_id_taken(college_id, student: Student):
    return Student.objects.filter(college_id=college_id).exclude(pk=student.pk).exists()


def _regenerate_college_id(student: Student):
    """Re-prefix the id for a new cohort, keeping the serial when it is still free there."""
    prefix = student_id_prefix(student.program, student.branch, student.batch)
    key = student_counter_key(prefix)
    match = _SERIAL.search(student.college_id or '')
    serial = int(match.group(1)) if match else 0

    candidate = f"{prefix}{serial:04d}" if serial else None
    if candidate and not _college_id_taken(candidate, student):
        ensure_counter_at_least(key, serial)
        return candidate

    while True:
        candidate = build_identifier(
            get_program_code(student.program),
            get_branch_code(student.program, student.branch),
            batch_year_short(student.batch),
            next_sequence(key),
        )
        if not _college_id_taken(candidate, student):
            return candidate


@transaction.atomic
def update_student(*, student: Student, **changes):
    unknown = set(changes) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown student fields: {', '.join(sorted(unknown))}.")

    student = Student.objects.select_for_update().select_related('user').get(pk=student.pk)
    provider = get_identity_provider()
    cohort_before = (student.program, student.branch, student.batch)
    old_email = student.email

    for field, value in changes.items():
        setattr(student, field, value.strip() if isinstance(value, str) else value)
    student.email = student.email.lower()

    if student.email != old_email:
        ensure_email_available(student.email, provider=provider)
    if (student.program, student.branch, student.batch) != cohort_before:
        student.college_id = _regenerate_college_id(student)
    if 'name' in changes:
        student.initials = initials_for(student.name)
        student.avatar_url = avatar_url_for(student.name)
    student.save()

    if student.user_id:
        user = student.user
        provider.update_user(
            user.uid,
            email=student.email if student.email != old_email else None,
            display_name=student.name if 'name' in changes else None,
        )
        claims = dict(user.claims or {})
        if claims.get('college_id') != student.college_id:
            claims.update(_student_claims(student.doc_id, student.college_id))
            provider.set_custom_user_claims(user.uid, claims)
        sync_identity(user=user, profile=student)

    sync_ledger_student_fields(student)
    Complaint.objects.filter(student=student).update(student_name=student.name, college_id=student.college_id)
    RoomResident.objects.filter(student=student).update(student_name=student.name)
    return student


def delete_student(*, student: Student):
    """Remove a student and everything keyed to them; the auth identity goes last."""
    user = student.user
    with transaction.atomic():
        if user is not None:
            user.enrolled_classes.clear()
            user.chat_rooms.clear()
            Notification.objects.filter(recipient=user).delete()
            Identity.objects.filter(user=user).delete()
        # Marks, attendance, backlogs, hall tickets, complaints, residency and the ledger cascade.
        college_id = student.college_id
        student.delete()

    if user is None:
        return
    try:
        get_identity_provider().delete_user(user.uid)
    except IdentityNotFound:
        logger.warning('Auth identity %s for student %s was already gone.', user.uid, college_id)
    except Exception:
        logger.exception('Could not delete auth identity %s for student %s.', user.uid, college_id)


def student_as_row(student: Student):
    return {
        'id': student.doc_id,
        'college_id': student.college_id,
        'name': student.name,
        'email': student.email,
        'program': student.program,
        'branch': student.branch,
        'year': student.year,
        'semester': student.semester,
        'section': student.section,
        'status': student.status,
        'type': student.type,
        'avatar_url': student.avatar_url,
    }


def get_students(*, program=None, branch=None, year=None, section=None, status=None, search=None):
    students = Student.objects.for_cohort(program=program, branch=branch, year=year, section=section)
    if status:
        students = students.filter(status=status)
    if search:
        students = students.filter(
            Q(name__icontains=search) | Q(college_id__icontains=search) | Q(email__icontains=search)
        )
    return [student_as_row(student) for student in students]


def get_student_enrolled_courses(student: Student):
    if not student.user_id:
        return []
    classes = (
        CollegeClass.objects.filter(students=student.user_id)
        .select_related('course', 'teacher__teacher_profile')
        .order_by('course__course_id')
    )
    courses = []
    for college_class in classes:
        teacher = getattr(college_class.teacher, 'teacher_profile', None) if college_class.teacher_id else None
        courses.append({
            'class_id': college_class.pk,
            'course_id': college_class.course.course_id,
            'name': college_class.course.name,
            'credits': college_class.course.credits,
            'semester': college_class.semester,
            'teacher_name': teacher.name if teacher else None,
        })
    return courses


def get_student_schedule(student: Student):
    if not student.user_id:
        return build_weekly_schedule([])
    classes = CollegeClass.objects.filter(students=student.user_id).select_related('course')
    return build_weekly_schedule(list(classes))


def get_student_profile_details(student: Student):
    data = student.as_profile()
    data['attendance_percentage'] = student_attendance_percentage(student)
    data['cgpa'] = calculate_cgpa(student)
    data['recent_grades'] = get_marks_records(student=student)[-5:]
    try:
        data['fees'] = get_student_fee_details(student)
    except ValidationError:
        data['fees'] = None
    data['hostel'] = get_student_hostel_data(student)
    data['enrolled_courses'] = get_student_enrolled_courses(student)
    return data


def get_student_performance_data(student: Student):
    """Marks per course plus monthly attendance for the months that have records."""
    zero = Decimal('0.00')
    marks = [
        {
            'subject': row['course_id'],
            'course_name': row['course_name'],
            'internals': row['internal_marks'] or zero,
            'externals': row['external_marks'] or zero,
            'total': row['total_marks'] or zero,
            'credits': row['credits'] or 0,
        }
        for row in get_marks_records(student=student)
    ]
    attendance = [
        {'month': row['label'], 'percentage': row['percentage']}
        for row in get_attendance_trend(student=student)
        if row['total_classes']
    ]
    return {'marks_data': marks, 'attendance_data': attendance}


def get_student_profile_for_teacher(*, teacher_user, student: Student):
    teaches = CollegeClass.objects.filter(
        teacher=teacher_user,
        program=student.program,
        branch=student.branch,
        section=student.section,
    ).exists()
    if not teaches:
        raise ValidationError('You can only view students from classes you teach.')
    return get_student_profile_details(student)


def get_sections_for_branch(*, program, branch, year=None):
    rows = (
        Student.objects.for_cohort(program=program, branch=branch, year=year)
        .exclude(section='')
        .values('section')
        .annotate(student_count=Count('id'))
        .order_by('section')
    )
    return [{'section': row['section'], 'student_count': row['student_count']} for row in rows]


def get_students_for_section(*, program, branch, year, section):
    students = Student.objects.for_cohort(program=program, branch=branch, year=year, section=section)
    return [student_as_row(student) for student in students.filter(status=Student.STATUS_ACTIVE)]
