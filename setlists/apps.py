from django.apps import AppConfig


class SetlistsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'setlists'
    verbose_name = 'Setlists'
