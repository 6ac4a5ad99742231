from django.apps import AppConfig

class OfflineAppConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "offline"
    verbose_name = "Offline worker"
