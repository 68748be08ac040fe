from django.apps import AppConfig


class FeesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.core.fees'
    label = 'fees'

    def ready(self):
        from . import tasks  # noqa: F401
