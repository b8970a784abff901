from django.apps import AppConfig


class AccountsConfig(AppConfig):
    name = "modules.accounts"
    label = "accounts"

    def ready(self) -> None:
        from modules.accounts import signals  # noqa: F401
