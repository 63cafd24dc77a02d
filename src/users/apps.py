from django.apps import AppConfig


class UsersConfig(AppConfig):
    name = "src.users"
    label = "users"
