from typing import Any, Iterable

import structlog
from django.conf import settings
from django.core.mail import EmailMultiAlternatives

logger = structlog.get_logger(__name__)


def email_send(
    *,
    to: Iterable[str],
    subject: str,
    html: str | None = None,
    text: str | None = None,
    cc: Iterable[str] | None = None,
    bcc: Iterable[str] | None = None,
    reply_to: Iterable[str] | None = None,
    extra_headers: dict[str, Any] | None = None,
) -> bool:
    """
    Envoie un email multipart (texte + HTML). Les erreurs SMTP remontent à l'appelant.
    """
    recipients = [addr for addr in (to or []) if addr]
    if not recipients:
        logger.info("email.skipped", reason="no_recipients", subject=subject)
        return False

    msg = EmailMultiAlternatives(
        subject=subject,
        body=text or "",
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=recipients,
        cc=list(cc or []),
        bcc=list(bcc or []),
        reply_to=list(reply_to or []),
        headers=extra_headers or {},
    )
    if html:
        msg.attach_alternative(html, "text/html")

    msg.send(fail_silently=False)
    logger.info("email.sent", to=recipients, subject=subject)
    return True
