from django.apps import AppConfig


class SequencesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.core.sequences'
    label = 'sequences'
