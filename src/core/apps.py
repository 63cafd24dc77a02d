from django.apps import AppConfig


class CoreConfig(AppConfig):
    name = "src.core"
    label = "core"
