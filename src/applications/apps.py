from django.apps import AppConfig


class ApplicationsConfig(AppConfig):
    name = "src.applications"
    label = "applications"
