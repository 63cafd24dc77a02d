from django.apps import AppConfig


class EmailsConfig(AppConfig):
    name = "src.emails"
    label = "emails"
