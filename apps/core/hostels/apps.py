from django.apps import AppConfig


class HostelsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.core.hostels'
    label = 'hostels'
