from __future__ import annotations

import uuid
from datetime import timedelta

from django.db.models import Q, QuerySet
from django.utils import timezone

from src.applications.models import Application, ApplicationKind, ApplicationStatus
from src.core.exceptions import NotFoundError, ValidationError
from src.core.policies import ensure_admin
from src.users.models import UserRole

LIST_SCOPES = ("my", "pending", "all")


def _base_qs() -> QuerySet[Application]:
    return Application.objects.select_related("applicant", "approver", "seal", "seal__keeper", "proposed_keeper")


def application_get(*, application_id: uuid.UUID) -> Application:
    try:
        return _base_qs().get(id=application_id)
    except Application.DoesNotExist:
        raise NotFoundError("Application not found", code="APPLICATION_NOT_FOUND")


def application_get_by_no(*, application_no: str) -> Application:
    try:
        return _base_qs().get(application_no=application_no)
    except Application.DoesNotExist:
        raise NotFoundError("Application not found", code="APPLICATION_NOT_FOUND")


def decidable_queryset(*, actor) -> QuerySet[Application]:
    """Applications the actor may decide (status not filtered)."""
    qs = _base_qs()
    if actor.role == UserRole.ADMIN:
        return qs
    return qs.filter(kind=ApplicationKind.USAGE, seal__keeper_id=actor.pk)


def application_list(
    *,
    actor,
    scope: str = "my",
    status: str | None = None,
    kind: str | None = None,
    keyword: str | None = None,
) -> QuerySet[Application]:
    """
    my: soumises par l'acteur
    pending: en attente d'une décision de l'acteur
    all: tout (administrateurs)
    """
    if scope == "my":
        qs = _base_qs().filter(applicant_id=actor.pk)
    elif scope == "pending":
        qs = decidable_queryset(actor=actor).filter(status=ApplicationStatus.PENDING)
    elif scope == "all":
        ensure_admin(actor)
        qs = _base_qs()
    else:
        raise ValidationError(f"scope must be one of {list(LIST_SCOPES)}", errors={"scope": ["invalid"]})

    if status:
        qs = qs.filter(status=status)
    if kind:
        qs = qs.filter(kind=kind)
    if keyword:
        k = keyword.strip()
        qs = qs.filter(
            Q(application_no__icontains=k)
            | Q(purpose__icontains=k)
            | Q(seal__name__icontains=k)
            | Q(seal_name__icontains=k)
            | Q(file_name__icontains=k)
            | Q(applicant__username__icontains=k)
            | Q(applicant__real_name__icontains=k)
        )

    return qs.order_by("-apply_time", "-application_no")


def application_upcoming(*, actor, hours: int = 24) -> QuerySet[Application]:
    """
    Demandes approuvées dont l'utilisation prévue tombe dans les prochaines `hours` heures,
    visible to the applicant and to whoever may decide them.
    """
    if not 1 <= hours <= 24 * 30:
        raise ValidationError("hours must be between 1 and 720", errors={"hours": ["out of range"]})
    now = timezone.now()
    visible = decidable_queryset(actor=actor) | _base_qs().filter(applicant_id=actor.pk)
    return (
        visible.filter(
            status=ApplicationStatus.APPROVED,
            expected_time__gte=now,
            expected_time__lte=now + timedelta(hours=hours),
        )
        .distinct()
        .order_by("expected_time", "application_no")
    )
