from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

import structlog
from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F
from django.http import HttpRequest
from django.utils import timezone

from src.applications import notifications, policies, selectors
from src.applications.models import (
    DECIDED_STATUSES,
    Application,
    ApplicationKind,
    ApplicationStatus,
)
from src.applications.numbering import application_no_allocate
from src.auditaction.models import AuditAction, AuditCategory
from src.auditaction.services import audit_action_create
from src.core.db import store_guard
from src.core.exceptions import (
    APIError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from src.seals.models import Seal, SealShape, SealStatus, SealType
from src.seals.services import seal_create_from_application
from src.users.models import User

logger = structlog.get_logger(__name__)

COMMON_EDITABLE_FIELDS = ("applicant_department", "purpose", "expected_time")
USAGE_EDITABLE_FIELDS = COMMON_EDITABLE_FIELDS + ("seal_id", "file_name", "addressee", "copies")
CREATION_EDITABLE_FIELDS = COMMON_EDITABLE_FIELDS + (
    "seal_name",
    "seal_type",
    "seal_shape",
    "owner_department",
    "keeper_department",
    "proposed_keeper_id",
    "keeper_phone",
)

DECISION_AUDIT_ACTIONS = {
    ApplicationStatus.APPROVED: AuditAction.APPLICATION_APPROVED,
    ApplicationStatus.REJECTED: AuditAction.APPLICATION_REJECTED,
}


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _lock_usable_seal(seal_id) -> Seal:
    """
    Lock the target seal row so a concurrent status change (LOST, DESTROYED)
    is serialized with the submission.
    """
    seal = Seal.objects.select_for_update().filter(id=seal_id).first()
    if seal is None:
        raise NotFoundError("Seal not found", code="SEAL_NOT_FOUND")
    if not seal.is_usable:
        raise ValidationError(
            f"Seal '{seal.name}' is {seal.status.lower()} and cannot be used",
            code="SEAL_NOT_USABLE",
            errors={"seal_id": [f"seal status is {seal.status}"]},
        )
    return seal


def _resolve_user(user_id, *, field: str) -> User:
    user = User.objects.filter(id=user_id).first()
    if user is None:
        raise NotFoundError("Keeper not found", code="KEEPER_NOT_FOUND", errors={field: ["unknown user"]})
    return user


def _validate_descriptor(*, seal_type: str | None, seal_shape: str | None, errors: dict) -> None:
    if not _blank(seal_type) and seal_type not in SealType.values:
        errors["seal_type"] = [f"must be one of {SealType.values}"]
    if not _blank(seal_shape) and seal_shape not in SealShape.values:
        errors["seal_shape"] = [f"must be one of {SealShape.values}"]


def _ensure_pending(application: Application) -> None:
    if application.status != ApplicationStatus.PENDING:
        raise InvalidStateError(
            f"Application {application.application_no} is already {application.status}",
            extra={"status": application.status},
        )


def _compare_and_swap(*, application: Application, **changes) -> Application:
    """
    UPDATE ... WHERE status = PENDING AND version = <read version>.
    Losing the race leaves the row untouched and raises InvalidStateError
    (row left PENDING) or ConflictError (row edited concurrently).
    """
    updated = Application.objects.filter(
        pk=application.pk,
        status=ApplicationStatus.PENDING,
        version=application.version,
    ).update(version=F("version") + 1, updated_at=timezone.now(), **changes)

    if updated == 0:
        current = Application.objects.filter(pk=application.pk).values("status", "version").first()
        if current is None:
            raise NotFoundError("Application not found", code="APPLICATION_NOT_FOUND")
        if current["status"] != ApplicationStatus.PENDING:
            raise InvalidStateError(
                f"Application {application.application_no} is already {current['status']}",
                extra={"status": current["status"]},
            )
        raise ConflictError(
            "Application was modified concurrently; reload it and retry",
            extra={"expected_version": application.version, "current_version": current["version"]},
        )

    application.refresh_from_db()
    return application


@store_guard("application.submit")
@transaction.atomic
def application_submit(
    *,
    applicant: User,
    kind: str,
    purpose: str,
    applicant_department: str | None = None,
    expected_time: datetime | None = None,
    seal_id: uuid.UUID | None = None,
    file_name: str = "",
    addressee: str = "",
    copies: int = 1,
    seal_name: str = "",
    seal_type: str = "",
    seal_shape: str = "",
    owner_department: str = "",
    keeper_department: str = "",
    proposed_keeper_id: uuid.UUID | None = None,
    keeper_phone: str = "",
    request: HttpRequest | None = None,
) -> Application:
    """
    Dépôt d'une demande (utilisation ou création de sceau) en statut PENDING.
    The department falls back to the applicant's own department.
    """
    if applicant is None or not getattr(applicant, "pk", None):
        raise ValidationError("applicant is required", errors={"applicant": ["required"]})
    if kind not in ApplicationKind.values:
        raise ValidationError("Unknown application kind", errors={"kind": [f"must be one of {ApplicationKind.values}"]})

    department = applicant_department if not _blank(applicant_department) else applicant.department

    errors: dict[str, list[str]] = {}
    if _blank(department):
        errors["applicant_department"] = ["required"]
    if _blank(purpose):
        errors["purpose"] = ["required"]

    if kind == ApplicationKind.USAGE:
        if not seal_id:
            errors["seal_id"] = ["required"]
        if copies is None or copies < 1:
            errors["copies"] = ["must be at least 1"]
    else:
        for field, value in (
            ("seal_name", seal_name),
            ("seal_type", seal_type),
            ("seal_shape", seal_shape),
            ("proposed_keeper_id", proposed_keeper_id),
        ):
            if _blank(value):
                errors[field] = ["required"]
        _validate_descriptor(seal_type=seal_type, seal_shape=seal_shape, errors=errors)

    if errors:
        raise ValidationError("Missing or invalid fields", errors=errors)

    fields: dict[str, Any] = {}
    if kind == ApplicationKind.USAGE:
        seal = _lock_usable_seal(seal_id)
        fields.update(seal=seal, file_name=file_name or "", addressee=addressee or "", copies=copies)
    else:
        keeper = _resolve_user(proposed_keeper_id, field="proposed_keeper_id")
        fields.update(
            seal_name=seal_name.strip(),
            seal_type=seal_type,
            seal_shape=seal_shape,
            owner_department=owner_department or "",
            keeper_department=keeper_department or keeper.department,
            proposed_keeper=keeper,
            keeper_phone=keeper_phone or keeper.phone,
        )

    now = timezone.now()
    application = Application.objects.create(
        application_no=application_no_allocate(kind=kind, at=now),
        kind=kind,
        status=ApplicationStatus.PENDING,
        version=1,
        applicant=applicant,
        applicant_department=department.strip(),
        purpose=purpose.strip(),
        apply_time=now,
        expected_time=expected_time,
        **fields,
    )

    audit_action_create(
        user=applicant,
        action=AuditAction.APPLICATION_SUBMITTED,
        category=AuditCategory.APPLICATION,
        details={"application_no": application.application_no, "kind": kind, "seal_id": seal_id},
        target_type="application",
        target_id=str(application.id),
        request=request,
    )
    logger.info(
        "application.submitted",
        application_id=str(application.id),
        application_no=application.application_no,
        kind=kind,
        applicant_id=str(applicant.pk),
    )
    notifications.schedule(notifications.notify_application_submitted, application, actor=applicant)
    return application


@store_guard("application.decide")
@transaction.atomic
def application_decide(
    *,
    application_id: uuid.UUID,
    actor: User,
    decision: str,
    remark: str | None = None,
    request: HttpRequest | None = None,
) -> Application:
    """
    Approve or reject a PENDING application.
    An approved creation application produces its seal in the same transaction.
    """
    if decision not in DECIDED_STATUSES:
        raise ValidationError(
            "decision must be APPROVED or REJECTED",
            errors={"decision": [f"must be one of {[s.value for s in DECIDED_STATUSES]}"]},
        )

    application = selectors.application_get(application_id=application_id)
    _ensure_pending(application)
    policies.ensure_can_decide(actor, application)

    application = _compare_and_swap(
        application=application,
        status=decision,
        approver=actor,
        approve_time=timezone.now(),
        approve_remark=remark or None,
    )

    seal = None
    if application.kind == ApplicationKind.CREATION and decision == ApplicationStatus.APPROVED:
        seal = seal_create_from_application(application=application)

    audit_action_create(
        user=actor,
        action=DECISION_AUDIT_ACTIONS[decision],
        category=AuditCategory.APPLICATION,
        details={
            "application_no": application.application_no,
            "remark": remark,
            "seal_id": seal.id if seal else None,
        },
        target_type="application",
        target_id=str(application.id),
        request=request,
    )
    logger.info(
        "application.decided",
        application_id=str(application.id),
        application_no=application.application_no,
        decision=decision,
        approver_id=str(actor.pk),
        created_seal_id=str(seal.id) if seal else None,
    )
    notifications.schedule(notifications.notify_application_decided, application, actor=actor)
    return application


@store_guard("application.withdraw")
@transaction.atomic
def application_withdraw(
    *,
    application_id: uuid.UUID,
    actor: User,
    request: HttpRequest | None = None,
) -> Application:
    application = selectors.application_get(application_id=application_id)
    _ensure_pending(application)
    policies.ensure_can_withdraw(actor, application)

    application = _compare_and_swap(
        application=application,
        status=ApplicationStatus.WITHDRAWN,
        withdrawn_at=timezone.now(),
    )

    audit_action_create(
        user=actor,
        action=AuditAction.APPLICATION_WITHDRAWN,
        category=AuditCategory.APPLICATION,
        details={"application_no": application.application_no},
        target_type="application",
        target_id=str(application.id),
        request=request,
    )
    logger.info("application.withdrawn", application_id=str(application.id), application_no=application.application_no)
    return application


@store_guard("application.update")
@transaction.atomic
def application_update(
    *,
    application_id: uuid.UUID,
    actor: User,
    request: HttpRequest | None = None,
    **patch,
) -> Application:
    """
    Modification du contenu d'une demande PENDING par son demandeur.
    Identity, status and decision fields are never patchable.
    """
    application = selectors.application_get(application_id=application_id)
    _ensure_pending(application)
    policies.ensure_can_update(actor, application)

    editable = USAGE_EDITABLE_FIELDS if application.kind == ApplicationKind.USAGE else CREATION_EDITABLE_FIELDS
    rejected = sorted(set(patch) - set(editable))
    if rejected:
        raise ValidationError(
            "Some fields cannot be modified",
            code="IMMUTABLE_FIELD",
            errors={f: ["not editable"] for f in rejected},
        )
    if not patch:
        return application

    errors: dict[str, list[str]] = {}
    for field in ("applicant_department", "purpose", "seal_name", "seal_type", "seal_shape", "proposed_keeper_id", "seal_id"):
        if field in patch and _blank(patch[field]):
            errors[field] = ["cannot be empty"]
    if "copies" in patch and (patch["copies"] is None or patch["copies"] < 1):
        errors["copies"] = ["must be at least 1"]
    _validate_descriptor(seal_type=patch.get("seal_type"), seal_shape=patch.get("seal_shape"), errors=errors)
    if errors:
        raise ValidationError("Missing or invalid fields", errors=errors)

    if "seal_id" in patch and patch["seal_id"] != application.seal_id:
        _lock_usable_seal(patch["seal_id"])
    if "proposed_keeper_id" in patch:
        _resolve_user(patch["proposed_keeper_id"], field="proposed_keeper_id")

    changes = {k: (v.strip() if isinstance(v, str) else v) for k, v in patch.items()}
    application = _compare_and_swap(application=application, **changes)

    audit_action_create(
        user=actor,
        action=AuditAction.APPLICATION_UPDATED,
        category=AuditCategory.APPLICATION,
        details={"application_no": application.application_no, "fields": sorted(changes)},
        target_type="application",
        target_id=str(application.id),
        request=request,
    )
    logger.info("application.updated", application_id=str(application.id), fields=sorted(changes))
    return application


def application_batch_decide(
    *,
    application_ids: list[uuid.UUID],
    actor: User,
    decision: str,
    remark: str | None = None,
    request: HttpRequest | None = None,
) -> dict[str, list]:
    """
    Décision groupée : chaque demande est traitée dans sa propre transaction.
    A failing item is reported and never rolls back the others.
    """
    if decision not in DECIDED_STATUSES:
        raise ValidationError(
            "decision must be APPROVED or REJECTED",
            errors={"decision": [f"must be one of {[s.value for s in DECIDED_STATUSES]}"]},
        )
    ids = list(dict.fromkeys(application_ids or []))
    if not ids:
        raise ValidationError("application_ids is required", errors={"application_ids": ["required"]})
    if len(ids) > settings.SEAL_APPLICATION_BATCH_MAX:
        raise ValidationError(
            f"At most {settings.SEAL_APPLICATION_BATCH_MAX} applications per batch",
            errors={"application_ids": ["too many"]},
        )

    succeeded: list[str] = []
    failed: list[dict[str, str]] = []
    for application_id in ids:
        try:
            application_decide(
                application_id=application_id,
                actor=actor,
                decision=decision,
                remark=remark,
                request=request,
            )
        except APIError as exc:
            failed.append({"id": str(application_id), "code": exc.code, "message": exc.message})
        except IntegrityError as exc:
            # the item's own atomic block is rolled back; earlier items stay committed
            logger.warning("application.batch_item_integrity_error", application_id=str(application_id), error=str(exc))
            failed.append({"id": str(application_id), "code": "CONFLICT", "message": "Rejected by a database constraint"})
        else:
            succeeded.append(str(application_id))

    logger.info("application.batch_decided", decision=decision, succeeded=len(succeeded), failed=len(failed))
    return {"succeeded": succeeded, "failed": failed}
