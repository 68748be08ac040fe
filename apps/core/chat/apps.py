from django.apps import AppConfig


class ChatConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.core.chat'
    label = 'chat'

    def ready(self):
        from . import tasks  # noqa: F401
