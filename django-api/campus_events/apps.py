from django.apps import AppConfig


class CampusEventsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "campus_events"
    verbose_name = "Campus events"

    def ready(self):
        import campus_events.signals  # noqa: F401, PLC0415
