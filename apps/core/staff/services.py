from __future__ import annotations

import logging

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone
from django.utils.crypto import constant_time_compare

from apps.core.academics.models import CollegeClass
from apps.core.academics.services import build_weekly_schedule, get_teacher_classes
from apps.core.notifications.models import Notification
from apps.core.sequences.identifiers import (
    ADMIN_DEPARTMENT,
    ROLE_PREFIXES,
    avatar_url_for,
    build_identifier,
    generate_password,
    get_department_code,
    initials_for,
    staff_counter_key,
    staff_id_prefix,
    year_short,
)
from apps.core.sequences.services import next_sequence
from apps.core.users.identity import IdentityNotFound, get_identity_provider
from apps.core.users.models import Identity, User, new_document_id
from apps.core.users.provisioning import ensure_email_available, provision_account
from apps.core.users.services import sync_identity

from .models import Administrator, Teacher

logger = logging.getLogger(__name__)

STAFF_MODELS = {
    User.ROLE_TEACHER: Teacher,
    User.ROLE_ADMIN: Administrator,
}
UPDATABLE_FIELDS = (
    'name',
    'email',
    'department',
    'position',
    'program',
    'status',
    'phone',
    'office_location',
    'qualifications',
    'specialization',
    'dob',
    'date_of_joining',
)
MIN_PASSWORD_LENGTH = 6


def _staff_model(role):
    model = STAFF_MODELS.get(role)
    if model is None:
        raise ValidationError(f"Invalid staff role: {role}.")
    return model


def _staff_claims(role, doc_id, staff_id):
    return {'role': role, 'staff_doc_id': doc_id, 'staff_id': staff_id}


def _next_staff_id(role, department, date_of_joining):
    sequence = next_sequence(staff_counter_key(staff_id_prefix(role, department, date_of_joining)))
    return build_identifier(
        ROLE_PREFIXES[role],
        get_department_code(department),
        year_short(date_of_joining),
        sequence,
    )


def _provision_staff(*, role, email, password, email_verified, profile_fields):
    model = _staff_model(role)
    doc_id = new_document_id()

    def write_profiles(user):
        profile = model.objects.create(doc_id=doc_id, user=user, email=user.email, **profile_fields)
        sync_identity(user=user, profile=profile)
        return profile

    _, profile = provision_account(
        email=email,
        password=password,
        display_name=profile_fields['name'],
        role=role,
        build_claims=lambda user: _staff_claims(role, doc_id, profile_fields['staff_id']),
        write_profiles=write_profiles,
        email_verified=email_verified,
    )
    return profile


def create_staff_account(
    *,
    role,
    name,
    email,
    dob,
    department='',
    position='',
    program='',
    phone='',
    office_location='',
    qualifications='',
    specialization='',
    date_of_joining=None,
):
    """Provision a teacher or administrator with a generated staff id and initial password."""
    _staff_model(role)
    if not name or not email:
        raise ValidationError('Name and email are required.')
    name = name.strip()
    department = department or (ADMIN_DEPARTMENT if role == User.ROLE_ADMIN else '')
    if not department:
        raise ValidationError('Department is required.')

    password = generate_password(name, dob)
    if not password:
        raise ValidationError('Could not generate an initial password from the name and date of birth.')

    ensure_email_available(email.strip().lower())
    date_of_joining = date_of_joining or timezone.localdate()
    staff_id = _next_staff_id(role, department, date_of_joining)

    profile = _provision_staff(
        role=role,
        email=email,
        password=password,
        email_verified=False,
        profile_fields={
            'staff_id': staff_id,
            'name': name,
            'department': department,
            'position': position,
            'program': program,
            'phone': phone,
            'office_location': office_location,
            'qualifications': qualifications,
            'specialization': specialization,
            'dob': dob,
            'date_of_joining': date_of_joining,
            'initials': initials_for(name),
            'avatar_url': avatar_url_for(name),
        },
    )
    logger.info('Created %s %s (%s).', role, profile.staff_id, profile.doc_id)
    return {'profile': profile, 'staff_id': staff_id, 'initial_password': password}


def admin_self_register(*, name, email, password, signup_code, phone=''):
    expected = settings.ADMIN_SIGNUP_CODE
    if not expected:
        raise ValidationError('Administrator sign-up is disabled.')
    if not constant_time_compare(signup_code or '', expected):
        raise ValidationError('Invalid administrator sign-up code.')
    if not name or not email:
        raise ValidationError('Name and email are required.')
    if len(password or '') < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")

    ensure_email_available(email.strip().lower())
    today = timezone.localdate()
    name = name.strip()

    return _provision_staff(
        role=User.ROLE_ADMIN,
        email=email,
        password=password,
        email_verified=True,
        profile_fields={
            'staff_id': _next_staff_id(User.ROLE_ADMIN, ADMIN_DEPARTMENT, today),
            'name': name,
            'department': ADMIN_DEPARTMENT,
            'position': 'Administrator',
            'phone': phone,
            'date_of_joining': today,
            'initials': initials_for(name),
            'avatar_url': avatar_url_for(name),
        },
    )


@transaction.atomic
def update_staff(*, profile, **changes):
    unknown = set(changes) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown staff fields: {', '.join(sorted(unknown))}.")

    profile = type(profile).objects.select_for_update().select_related('user').get(pk=profile.pk)
    provider = get_identity_provider()
    old_email = profile.email

    for field, value in changes.items():
        setattr(profile, field, value.strip() if isinstance(value, str) else value)
    profile.email = profile.email.lower()
    if profile.email != old_email:
        ensure_email_available(profile.email, provider=provider)
    if 'name' in changes:
        profile.initials = initials_for(profile.name)
        profile.avatar_url = avatar_url_for(profile.name)
    profile.save()

    if profile.user_id:
        provider.update_user(
            profile.user.uid,
            email=profile.email if profile.email != old_email else None,
            display_name=profile.name if 'name' in changes else None,
        )
        sync_identity(user=profile.user, profile=profile)
    return profile


def delete_teacher(*, teacher: Teacher):
    user = teacher.user
    staff_id = teacher.staff_id
    with transaction.atomic():
        if user is not None:
            unassigned = CollegeClass.objects.filter(teacher=user).update(teacher=None)
            if unassigned:
                logger.info('Unassigned %s from %s classes.', staff_id, unassigned)
            user.chat_rooms.clear()
            Notification.objects.filter(recipient=user).delete()
            Identity.objects.filter(user=user).delete()
        teacher.delete()

    if user is None:
        return
    try:
        get_identity_provider().delete_user(user.uid)
    except IdentityNotFound:
        logger.warning('Auth identity %s for teacher %s was already gone.', user.uid, staff_id)
    except Exception:
        logger.exception('Could not delete auth identity %s for teacher %s.', user.uid, staff_id)


def staff_as_row(profile):
    return {
        'id': profile.doc_id,
        'uid': profile.user.uid if profile.user_id else None,
        'staff_id': profile.staff_id,
        'name': profile.name,
        'email': profile.email,
        'role': profile.ROLE,
        'department': profile.department,
        'position': profile.position,
        'program': profile.program,
        'status': profile.status,
        'avatar_url': profile.avatar_url,
    }


def get_teachers(*, department=None, status=None):
    teachers = Teacher.objects.select_related('user')
    if department:
        teachers = teachers.filter(department=department)
    if status:
        teachers = teachers.filter(status=status)
    return [staff_as_row(teacher) for teacher in teachers]


def get_staff(*, role=None, department=None, status=None):
    roles = [role] if role else [User.ROLE_ADMIN, User.ROLE_TEACHER]
    rows = []
    for staff_role in roles:
        profiles = _staff_model(staff_role).objects.select_related('user')
        if department:
            profiles = profiles.filter(department=department)
        if status:
            profiles = profiles.filter(status=status)
        rows.extend(staff_as_row(profile) for profile in profiles)
    return sorted(rows, key=lambda row: row['staff_id'])


def get_assignable_teachers(*, program=None):
    teachers = Teacher.objects.filter(status=Teacher.STATUS_ACTIVE, user__isnull=False).select_related('user')
    if program:
        teachers = teachers.filter(program__in=[program, ''])
    return [
        {
            'uid': teacher.user.uid,
            'name': teacher.name,
            'staff_id': teacher.staff_id,
            'department': teacher.department,
        }
        for teacher in teachers
    ]


def get_teacher_for_user(user) -> Teacher:
    teacher = Teacher.objects.select_related('user').filter(user=user).first()
    if teacher is None:
        raise ValidationError('Teacher profile not found for this account.')
    return teacher


def get_teacher_profile_details(teacher: Teacher):
    data = teacher.as_profile()
    if not teacher.user_id:
        data['classes'] = []
        data['schedule'] = build_weekly_schedule([])
        return data

    data['classes'] = get_teacher_classes(teacher.user)
    classes = CollegeClass.objects.filter(teacher=teacher.user).select_related('course')
    data['schedule'] = build_weekly_schedule(list(classes))
    return data
