"""Create-then-compensate account provisioning.

The authentication store and the profile tables share no transaction, so each
attempt is tracked by a ``ProvisioningSaga`` row: identities whose profile write
failed are deleted straight away, and anything left behind (a failed delete, a
process that died mid-way) is picked up later by ``reconcile_orphaned_identities``.
"""
import logging
from datetime import timedelta

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from .identity import IdentityNotFound, get_identity_provider
from .models import Identity, ProvisioningSaga

logger = logging.getLogger(__name__)


class AlreadyRegistered(ValidationError):
    pass


def ensure_email_available(email, provider=None):
    provider = provider or get_identity_provider()
    try:
        provider.get_user_by_email(email)
    except IdentityNotFound:
        return
    raise AlreadyRegistered(f"The email address {email} is already registered.")


def _compensate(provider, saga, error):
    saga.attempts += 1
    saga.error = str(error)[:2000]
    try:
        provider.delete_user(saga.uid)
    except IdentityNotFound:
        saga.status = ProvisioningSaga.STATUS_COMPENSATED
    except Exception:
        logger.exception(
            'Compensating delete failed for identity %s (%s); identity left orphaned.',
            saga.uid,
            saga.email,
        )
        saga.status = ProvisioningSaga.STATUS_ORPHANED
    else:
        saga.status = ProvisioningSaga.STATUS_COMPENSATED
        logger.info('Rolled back identity %s after failed profile write.', saga.uid)
    saga.save(update_fields=['attempts', 'error', 'status', 'updated_at'])


def provision_account(
    *,
    email,
    password,
    display_name,
    role,
    build_claims,
    write_profiles,
    email_verified=False,
):
    """Provision an authentication identity plus its profile records.

    ``build_claims(user)`` returns the custom claims attached to the identity.
    ``write_profiles(user)`` runs inside one atomic block and returns whatever
    the caller needs back (usually the role profile). Any failure after the
    identity exists deletes it again before the error propagates.
    """
    provider = get_identity_provider()
    email = (email or '').strip().lower()
    ensure_email_available(email, provider=provider)

    saga = ProvisioningSaga.objects.create(email=email, role=role)
    try:
        user = provider.create_user(
            email=email,
            password=password,
            display_name=display_name,
            role=role,
            email_verified=email_verified,
        )
    except Exception as exc:
        saga.status = ProvisioningSaga.STATUS_COMPENSATED
        saga.error = str(exc)[:2000]
        saga.save(update_fields=['status', 'error', 'updated_at'])
        raise

    saga.uid = user.uid
    saga.save(update_fields=['uid', 'updated_at'])

    try:
        claims = build_claims(user)
        provider.set_custom_user_claims(user.uid, claims)
        user.claims = claims
        with transaction.atomic():
            result = write_profiles(user)
    except Exception as exc:
        _compensate(provider, saga, exc)
        raise

    saga.status = ProvisioningSaga.STATUS_COMPLETED
    saga.save(update_fields=['status', 'updated_at'])
    return user, result


def reconcile_orphaned_identities(*, now=None):
    """Retry compensation for orphaned sagas and pending ones that went stale."""
    provider = get_identity_provider()
    now = now or timezone.now()
    cutoff = now - timedelta(minutes=settings.PROVISIONING_STALE_MINUTES)

    sagas = ProvisioningSaga.objects.filter(
        Q(status=ProvisioningSaga.STATUS_ORPHANED)
        | Q(status=ProvisioningSaga.STATUS_PENDING, updated_at__lt=cutoff)
    ).order_by('created_at')

    summary = {'completed': 0, 'compensated': 0, 'orphaned': 0}
    for saga in sagas:
        if saga.uid and Identity.objects.filter(user__uid=saga.uid).exists():
            saga.status = ProvisioningSaga.STATUS_COMPLETED
            saga.save(update_fields=['status', 'updated_at'])
            summary['completed'] += 1
            continue

        if not saga.uid:
            saga.status = ProvisioningSaga.STATUS_COMPENSATED
            saga.save(update_fields=['status', 'updated_at'])
            summary['compensated'] += 1
            continue

        _compensate(provider, saga, saga.error or 'Reconciled stale provisioning attempt.')
        summary[saga.status] += 1

    if any(summary.values()):
        logger.info('Identity reconciliation finished: %s', summary)
    return summary
