import logging

from django.apps import apps as django_apps
from django.core.exceptions import ValidationError
from django.db import transaction

from apps.core.notifications.dispatch import enqueue

from .identity import IdentityNotFound, get_identity_provider
from .models import Identity, User

logger = logging.getLogger(__name__)

ROLE_PROFILE_MODELS = {
    User.ROLE_STUDENT: 'students.Student',
    User.ROLE_TEACHER: 'staff.Teacher',
    User.ROLE_ADMIN: 'staff.Administrator',
}


def role_profile_model(role):
    label = ROLE_PROFILE_MODELS.get(role)
    if not label:
        return None
    return django_apps.get_model(label)


def get_role_profile(user):
    model = role_profile_model(user.role)
    if model is None:
        return None
    return model.objects.filter(user=user).first()


def identity_as_dict(identity: Identity):
    return {
        'uid': identity.user.uid,
        'name': identity.name,
        'email': identity.email,
        'role': identity.role,
        'role_doc_id': identity.role_doc_id,
        'college_id': identity.college_id,
        'staff_id': identity.staff_id,
        'initials': identity.initials,
        'avatar_url': identity.avatar_url,
        'program': identity.program,
        'branch': identity.branch,
        'year': identity.year,
        'section': identity.section,
        'notifications_enabled': identity.notifications_enabled,
    }


def sync_identity(*, user, profile):
    """Create or refresh the Identity row from a role profile."""
    identity, _ = Identity.objects.update_or_create(
        user=user,
        defaults=profile.identity_defaults(),
    )
    return identity


@transaction.atomic
def link_missing_profile(*, user):
    """Re-attach a role profile created for ``user``'s email but never linked to it."""
    model = role_profile_model(user.role)
    if model is None or not user.email:
        return None

    profile = model.objects.select_for_update().filter(email__iexact=user.email).first()
    if profile is None:
        return None
    if profile.user_id and profile.user_id != user.pk:
        raise ValidationError('This profile is already linked to another account.')

    if profile.user_id != user.pk:
        profile.user = user
        profile.save(update_fields=['user', 'updated_at'])
        logger.info('Linked %s profile %s to identity %s.', user.role, profile.doc_id, user.uid)
    return sync_identity(user=user, profile=profile)


def get_user_profile_on_login(*, user):
    identity = Identity.objects.select_related('user').filter(user=user).first()
    profile = get_role_profile(user)
    if identity is None or (profile is None and user.role in ROLE_PROFILE_MODELS):
        identity = link_missing_profile(user=user) or identity
        profile = get_role_profile(user)

    if identity is None:
        raise ValidationError('User profile not found. Please contact the administrator.')

    data = identity_as_dict(identity)
    data['claims'] = user.claims
    data['profile'] = profile.as_profile() if profile else None
    return data


def send_password_reset_link(*, email):
    """Queue a reset email. Returns False for unknown emails without telling the caller why."""
    provider = get_identity_provider()
    try:
        link = provider.generate_password_reset_link(email)
    except IdentityNotFound:
        logger.info('Password reset requested for unregistered email %s.', email)
        return False

    enqueue(
        'email.send',
        subject='Reset your College ERP password',
        body=f"Use the link below to choose a new password.\n\n{link}\n",
        recipients=[email],
    )
    return True


def get_user_settings(user):
    identity = Identity.objects.filter(user=user).first()
    if identity is None:
        raise ValidationError('User profile not found.')
    return {
        'name': identity.name,
        'email': identity.email,
        'role': identity.role,
        'display_id': identity.display_id,
        'notifications_enabled': identity.notifications_enabled,
    }


def update_notification_preferences(*, user, enabled: bool):
    updated = Identity.objects.filter(user=user).update(notifications_enabled=bool(enabled))
    if not updated:
        raise ValidationError('User profile not found.')
    return bool(enabled)
