from django.apps import AppConfig


class SeedersConfig(AppConfig):
    name = "src.seeders"
    label = "seeders"
