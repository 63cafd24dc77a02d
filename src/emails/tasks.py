from typing import Any

from celery import shared_task

from src.emails.services import email_send


@shared_task(name="emails.send_email")
def send_email_task(payload: dict[str, Any]) -> bool:
    """
    payload example:
      {
        "to": ["keeper@example.com"],
        "subject": "[Seals] New application YY202601050001",
        "html": "<p>...</p>",
        "text": "...",
      }
    """
    return email_send(**payload)
