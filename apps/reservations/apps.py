from django.apps import AppConfig


class ReservationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.reservations"

    def ready(self) -> None:  # pragma: no cover - import side effects
        from .application.command_handlers import register_handlers

        register_handlers()
