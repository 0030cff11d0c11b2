from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    name = "apps.notifications"
    label = "notifications"

    def ready(self) -> None:  # pragma: no cover - import side effects
        from .handlers import register_handlers

        register_handlers()
