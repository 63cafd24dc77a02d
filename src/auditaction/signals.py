from django.contrib.auth.signals import user_login_failed
from django.dispatch import receiver

from src.auditaction.models import AuditAction, AuditCategory, Severity
from src.auditaction.services import audit_action_create


# ninja-jwt issues tokens without sending user_logged_in; only failed
# attempts reach the auth signals.
@receiver(user_login_failed)
def _on_login_failed(sender, credentials, request=None, **kwargs):
    audit_action_create(user=None,
                        action=AuditAction.AUTH_LOGIN_FAILED,
                        category=AuditCategory.AUTH,
                        details={"username": credentials.get("username"), "path": getattr(request, "path", "")},
                        severity=Severity.WARNING,
                        request=request,
                        )
