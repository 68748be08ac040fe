"""Authentication identity providers.

Account provisioning talks to the authentication store only through the
provider configured in ``settings.IDENTITY_PROVIDER``. The local provider keeps
identities in Django's auth table; a hosted provider can be swapped in as long
as it implements the same methods.
"""
from django.conf import settings
from django.contrib.auth.tokens import default_token_generator
from django.utils.encoding import force_bytes
from django.utils.http import urlsafe_base64_encode
from django.utils.module_loading import import_string

from .models import User


class IdentityNotFound(Exception):
    """No authentication identity matches the lookup."""


class BaseIdentityProvider:
    def get_user_by_email(self, email):
        raise NotImplementedError

    def get_user(self, uid):
        raise NotImplementedError

    def create_user(self, *, email, password, display_name, role, email_verified=False):
        raise NotImplementedError

    def update_user(self, uid, *, email=None, display_name=None, password=None):
        raise NotImplementedError

    def set_custom_user_claims(self, uid, claims):
        raise NotImplementedError

    def delete_user(self, uid):
        raise NotImplementedError

    def generate_password_reset_link(self, email):
        raise NotImplementedError


def _split_name(display_name):
    parts = (display_name or '').strip().split(' ', 1)
    first = parts[0] if parts else ''
    last = parts[1] if len(parts) > 1 else ''
    return first[:150], last[:150]


class LocalIdentityProvider(BaseIdentityProvider):
    def get_user_by_email(self, email):
        user = User.objects.filter(email__iexact=(email or '').strip()).first()
        if user is None:
            raise IdentityNotFound(email)
        return user

    def get_user(self, uid):
        user = User.objects.filter(uid=uid).first()
        if user is None:
            raise IdentityNotFound(uid)
        return user

    def create_user(self, *, email, password, display_name, role, email_verified=False):
        email = email.strip().lower()
        first_name, last_name = _split_name(display_name)
        user = User(
            username=email,
            email=email,
            first_name=first_name,
            last_name=last_name,
            role=role,
            email_verified=email_verified,
        )
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save()
        return user

    def update_user(self, uid, *, email=None, display_name=None, password=None):
        user = self.get_user(uid)
        updates = []
        if email:
            user.email = email.strip().lower()
            user.username = user.email
            updates.extend(['email', 'username'])
        if display_name:
            user.first_name, user.last_name = _split_name(display_name)
            updates.extend(['first_name', 'last_name'])
        if password:
            user.set_password(password)
            updates.append('password')
        if updates:
            user.save(update_fields=updates)
        return user

    def set_custom_user_claims(self, uid, claims):
        updated = User.objects.filter(uid=uid).update(claims=dict(claims or {}))
        if not updated:
            raise IdentityNotFound(uid)

    def delete_user(self, uid):
        deleted, _ = User.objects.filter(uid=uid).delete()
        if not deleted:
            raise IdentityNotFound(uid)

    def generate_password_reset_link(self, email):
        user = self.get_user_by_email(email)
        token = default_token_generator.make_token(user)
        uidb64 = urlsafe_base64_encode(force_bytes(user.pk))
        return f"{settings.PASSWORD_RESET_URL.rstrip('/')}/{uidb64}/{token}/"


def get_identity_provider():
    return import_string(settings.IDENTITY_PROVIDER)()
