from django.contrib.auth import get_user_model

from .dispatch import enqueue
from .models import Notification


def _recipients(queryset):
    # Users who switched notifications off in their settings are skipped.
    return queryset.exclude(identity__notifications_enabled=False)


def _bulk_notify(users, *, title, message, type, link):
    rows = [
        Notification(recipient=user, title=title[:150], message=message, type=type, link=link or '')
        for user in users
    ]
    Notification.objects.bulk_create(rows)
    return len(rows)


def create_notification(*, recipient, title, message, type=Notification.TYPE_INFO, link=''):
    return Notification.objects.create(
        recipient=recipient,
        title=title[:150],
        message=message,
        type=type,
        link=link or '',
    )


def create_notifications_for_uids(*, uids, title, message, type=Notification.TYPE_INFO, link=''):
    uids = [uid for uid in dict.fromkeys(uids or []) if uid]
    if not uids:
        return 0
    users = _recipients(get_user_model().objects.filter(uid__in=uids, is_active=True))
    return _bulk_notify(users, title=title, message=message, type=type, link=link)


def create_notifications_for_roles(*, roles, title, message, type=Notification.TYPE_INFO, link=''):
    if isinstance(roles, str):
        roles = [roles]
    users = _recipients(get_user_model().objects.filter(role__in=roles, is_active=True))
    return _bulk_notify(users, title=title, message=message, type=type, link=link)


def notify_uids(uids, *, title, message, type=Notification.TYPE_INFO, link=''):
    """Queue a notification fan-out; it runs after the current transaction commits."""
    return enqueue(
        'notifications.for_uids',
        uids=list(uids),
        title=title,
        message=message,
        type=type,
        link=link,
    )


def notify_roles(roles, *, title, message, type=Notification.TYPE_INFO, link=''):
    if isinstance(roles, str):
        roles = [roles]
    return enqueue(
        'notifications.for_roles',
        roles=list(roles),
        title=title,
        message=message,
        type=type,
        link=link,
    )


def notification_as_dict(notification: Notification):
    return {
        'id': notification.pk,
        'title': notification.title,
        'message': notification.message,
        'type': notification.type,
        'link': notification.link,
        'read': notification.read,
        'timestamp': notification.timestamp,
    }


def get_notifications_for_user(user, *, limit=50, unread_only=False):
    notifications = Notification.objects.filter(recipient=user)
    if unread_only:
        notifications = notifications.filter(read=False)
    return [notification_as_dict(item) for item in notifications[:limit]]


def mark_notifications_read(*, user, ids=None):
    notifications = Notification.objects.filter(recipient=user, read=False)
    if ids:
        notifications = notifications.filter(pk__in=ids)
    return notifications.update(read=True)
