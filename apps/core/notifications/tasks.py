from django.conf import settings
from django.core.mail import send_mail

from .dispatch import register
from .services import create_notifications_for_roles, create_notifications_for_uids


@register('notifications.for_uids')
def deliver_notifications_to_uids(*, uids, title, message, type, link=''):
    create_notifications_for_uids(uids=uids, title=title, message=message, type=type, link=link)


@register('notifications.for_roles')
def deliver_notifications_to_roles(*, roles, title, message, type, link=''):
    create_notifications_for_roles(roles=roles, title=title, message=message, type=type, link=link)


@register('email.send')
def deliver_email(*, subject, body, recipients):
    send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, recipients, fail_silently=False)
