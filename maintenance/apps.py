from django.apps import AppConfig


class MaintenanceConfig(AppConfig):
    name = 'maintenance'
    verbose_name = 'Mantenimiento de Ascensores'
    default_auto_field = 'django.db.models.BigAutoField'

    def ready(self):
        from . import signals  # noqa: F401
