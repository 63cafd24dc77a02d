from datetime import datetime

from django.db import transaction
from django.utils import timezone

from src.applications.models import ApplicationKind, ApplicationNumberCounter

NUMBER_PREFIXES = {
    ApplicationKind.USAGE: "YY",
    ApplicationKind.CREATION: "SC",
}


def format_application_no(*, prefix: str, day, sequence: int) -> str:
    return f"{prefix}{day:%Y%m%d}{sequence:04d}"


@transaction.atomic
def application_no_allocate(*, kind: str, at: datetime | None = None) -> str:
    """
    Next number for the apply day, e.g. YY202601050001.
    The counter row is locked until the caller's transaction ends, so a
    number is handed out once even if the application is later withdrawn.
    """
    prefix = NUMBER_PREFIXES[kind]
    day = timezone.localdate(at or timezone.now())

    ApplicationNumberCounter.objects.get_or_create(prefix=prefix, day=day)
    counter = ApplicationNumberCounter.objects.select_for_update().get(prefix=prefix, day=day)
    counter.last_value += 1
    counter.save(update_fields=["last_value", "updated_at"])

    return format_application_no(prefix=prefix, day=day, sequence=counter.last_value)
