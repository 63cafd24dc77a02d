from django.apps import AppConfig


class SealsConfig(AppConfig):
    name = "src.seals"
    label = "seals"
