from django.apps import AppConfig


class AuditactionConfig(AppConfig):
    name = "src.auditaction"
    label = "auditaction"

    def ready(self):
        # auth signals -> audit entries
        from . import signals  # noqa: F401
