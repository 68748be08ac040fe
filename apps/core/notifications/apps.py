from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.core.notifications'
    label = 'notifications'

    def ready(self):
        from . import tasks  # noqa: F401
