"""Placement and internship postings and student applications.

One application per student and opportunity is enforced by a unique
constraint; the duplicate check before the insert only shapes the message.
"""
from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from apps.core.notifications.services import notify_roles, notify_uids
from apps.core.students.models import Student

from .models import Application, Opportunity

logger = logging.getLogger(__name__)

OPPORTUNITY_FIELDS = (
    'type',
    'company',
    'role',
    'ctc_stipend',
    'location',
    'duration',
    'description',
    'skills',
    'eligibility',
    'status',
)


def _check_type(type):
    if type not in dict(Opportunity.TYPE_CHOICES):
        raise ValidationError(f"Unknown opportunity type: {type}.")


def opportunity_as_dict(opportunity: Opportunity):
    return {
        'id': opportunity.pk,
        'type': opportunity.type,
        'company': opportunity.company,
        'role': opportunity.role,
        'ctc_stipend': opportunity.ctc_stipend,
        'location': opportunity.location,
        'duration': opportunity.duration,
        'description': opportunity.description,
        'skills': opportunity.skills,
        'eligibility': opportunity.eligibility,
        'status': opportunity.status,
        'posted_at': opportunity.posted_at,
    }


def get_opportunities(type, *, status=None):
    """Postings of one type, newest first."""
    _check_type(type)
    opportunities = Opportunity.objects.filter(type=type)
    if status:
        opportunities = opportunities.filter(status=status)
    return [opportunity_as_dict(opportunity) for opportunity in opportunities]


def save_opportunity(*, opportunity: Opportunity | None = None, **fields):
    """Create a posting, or merge ``fields`` into an existing one."""
    unknown = set(fields) - set(OPPORTUNITY_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown opportunity fields: {', '.join(sorted(unknown))}.")

    if opportunity is None:
        opportunity = Opportunity()
        for field in ('type', 'company', 'role'):
            if not str(fields.get(field) or '').strip():
                raise ValidationError(f"Opportunity {field} is required.")

    if 'type' in fields:
        _check_type(fields['type'])
    if 'status' in fields and fields['status'] not in dict(Opportunity.STATUS_CHOICES):
        raise ValidationError(f"Invalid opportunity status: {fields['status']}.")
    skills = fields.get('skills')
    if skills is not None:
        fields['skills'] = [str(skill).strip() for skill in skills if str(skill).strip()]

    for field, value in fields.items():
        if value is None:
            continue
        setattr(opportunity, field, value.strip() if isinstance(value, str) else value)
    opportunity.save()
    return opportunity


def delete_opportunity(*, opportunity: Opportunity):
    """Delete a posting; applications keep their copied company and role."""
    pk = opportunity.pk
    opportunity.delete()
    logger.info('Deleted opportunity %s.', pk)
    return pk


def submit_application(*, student: Student, opportunity: Opportunity):
    if opportunity.status != Opportunity.STATUS_OPEN:
        raise ValidationError(f"This {opportunity.type} is no longer accepting applications.")

    duplicate = ValidationError(f"You have already applied for this {opportunity.type}.")
    if Application.objects.filter(student=student, opportunity=opportunity).exists():
        raise duplicate
    try:
        with transaction.atomic():
            application = Application.objects.create(
                student=student,
                opportunity=opportunity,
                opportunity_type=opportunity.type,
                company=opportunity.company,
                role=opportunity.role,
            )
    except IntegrityError as exc:
        raise duplicate from exc

    notify_roles(
        'admin',
        title='New Application',
        message=f"{student.name} ({student.college_id}) applied for {opportunity.role} at {opportunity.company}.",
        type='task',
        link='/admin/opportunities',
    )
    logger.info('Student %s applied to opportunity %s.', student.college_id, opportunity.pk)
    return application


def application_as_dict(application: Application):
    return {
        'id': application.pk,
        'opportunity_id': application.opportunity_id,
        'opportunity_type': application.opportunity_type,
        'student_id': application.student.doc_id,
        'college_id': application.student.college_id,
        'student_name': application.student.name,
        'company': application.company,
        'role': application.role,
        'status': application.status,
        'applied_at': application.applied_at,
    }


def get_applications_for_student(student: Student):
    applications = Application.objects.select_related('student').filter(student=student)
    return [application_as_dict(application) for application in applications]


def get_applications_for_opportunity(opportunity: Opportunity):
    applications = Application.objects.select_related('student').filter(opportunity=opportunity)
    return [application_as_dict(application) for application in applications]


def update_application_status(*, application: Application, status):
    if status not in dict(Application.STATUS_CHOICES):
        raise ValidationError(f"Invalid application status: {status}.")
    if application.status == status:
        return application

    application.status = status
    application.save(update_fields=['status', 'updated_at'])

    student = application.student
    if student.user_id:
        notify_uids(
            [student.user.uid],
            title='Application Status Updated',
            message=f"Your application for {application.role} at {application.company} is now {status}.",
            type='info',
            link=f"/student/{application.opportunity_type}s",
        )
    return application
