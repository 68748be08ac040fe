from django.contrib.auth.signals import user_logged_in, user_logged_out, user_login_failed
from django.dispatch import receiver

from apps.core.users.audit import log_audit_event


@receiver(user_logged_in)
def log_login(sender, request, user, **kwargs):
    log_audit_event(request, 'user.login', target=user.uid, details=f"Role={user.role}", user=user)


@receiver(user_logged_out)
def log_logout(sender, request, user, **kwargs):
    if user is not None:
        log_audit_event(request, 'user.logout', target=user.uid, details=f"Role={user.role}", user=user)


@receiver(user_login_failed)
def log_failed_login(sender, credentials, request=None, **kwargs):
    # Credentials arrive with the password already masked.
    log_audit_event(request, 'user.login_failed', details=f"Username={credentials.get('username', '')}")
