from django.apps import AppConfig


class CoreConfig(AppConfig):
    name = "modules.core"
    label = "core"

    def ready(self) -> None:
        # Bind shared tasks to the project's Celery app.
        from config.celery import app  # noqa: F401
