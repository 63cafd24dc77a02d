from typing import Any, Callable
from urllib.parse import urljoin

import structlog
from django.conf import settings
from django.db import transaction
from django.template.loader import render_to_string
from django.utils.html import strip_tags

from src.applications.models import Application, ApplicationKind, ApplicationStatus
from src.auditaction.models import AuditAction, AuditCategory
from src.auditaction.services import audit_action_create
from src.emails.tasks import send_email_task
from src.users.selectors import admin_emails

logger = structlog.get_logger(__name__)

SUBJECT_PREFIX = "[Seals]"


def _queue_email(*, to: list[str], subject: str, template: str, context: dict[str, Any]) -> bool:
    recipients = [addr for addr in to if addr]
    if not recipients:
        return False
    html = render_to_string(template, context)
    send_email_task.delay({"to": recipients, "subject": subject, "html": html, "text": strip_tags(html)})
    return True


def _context(application: Application) -> dict[str, Any]:
    return {
        "application": application,
        "application_no": application.application_no,
        "kind": ApplicationKind(application.kind).label,
        "seal_name": application.seal.name if application.seal_id else application.seal_name,
        "applicant": application.applicant.display_name,
        "detail_url": urljoin(settings.FRONTEND_URL, f"/applications/{application.id}"),
    }


def notify_application_submitted(application: Application) -> bool:
    """
    Prévient les personnes habilitées à décider : le gardien du sceau
    (utilisation) ou les administrateurs (création).
    """
    if application.kind == ApplicationKind.USAGE:
        recipients = [application.seal.keeper.email]
    else:
        recipients = admin_emails()

    return _queue_email(
        to=recipients,
        subject=f"{SUBJECT_PREFIX} New application {application.application_no}",
        template="applications/emails/application_submitted.html",
        context=_context(application),
    )


def notify_application_decided(application: Application) -> bool:
    """Prévient le demandeur de la décision."""
    approved = application.status == ApplicationStatus.APPROVED
    ctx = _context(application)
    ctx.update({
        "approved": approved,
        "approver": application.approver.display_name if application.approver_id else "",
        "remark": application.approve_remark or "",
    })
    return _queue_email(
        to=[application.applicant.email],
        subject=f"{SUBJECT_PREFIX} Application {application.application_no} {'approved' if approved else 'rejected'}",
        template="applications/emails/application_decided.html",
        context=ctx,
    )


def schedule(notify: Callable[[Application], bool], application: Application, *, actor) -> None:
    """
    Run `notify` once the surrounding transaction commits.
    Email failures are logged and audited; the transition itself stands.
    """
    if not settings.SEAL_NOTIFICATIONS_ENABLED:
        return

    def _send():
        try:
            sent = notify(application)
        except Exception as e:
            logger.exception(
                "application.notification_failed",
                application_id=str(application.id),
                notification=notify.__name__,
            )
            audit_action_create(
                user=actor,
                action=AuditAction.EMAIL_SEND_FAILED,
                category=AuditCategory.APPLICATION,
                details={"application_no": application.application_no, "error": str(e)},
                target_type="application",
                target_id=str(application.id),
            )
            return
        if sent:
            audit_action_create(
                user=actor,
                action=AuditAction.EMAIL_QUEUED,
                category=AuditCategory.APPLICATION,
                details={"application_no": application.application_no, "notification": notify.__name__},
                target_type="application",
                target_id=str(application.id),
            )

    transaction.on_commit(_send)
