from django.apps import AppConfig


class HistoryConfig(AppConfig):
    name = "modules.history"
    label = "history"
