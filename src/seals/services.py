from __future__ import annotations

import uuid

import structlog
from django.db import transaction

from src.auditaction.models import AuditAction, AuditCategory
from src.auditaction.services import audit_action_create
from src.core.exceptions import InvalidStateError, NotFoundError, ValidationError
from src.core.policies import ensure_admin
from src.seals import selectors
from src.seals.models import Seal, SealShape, SealStatus, SealType
from src.users.models import User

logger = structlog.get_logger(__name__)

SEAL_EDITABLE_FIELDS = (
    "name",
    "type",
    "shape",
    "owner_department",
    "keeper_department",
    "keeper_phone",
    "description",
    "location",
)


def _resolve_keeper(keeper_id) -> User:
    if not keeper_id:
        raise ValidationError("keeper is required", errors={"keeper_id": ["required"]})
    keeper = User.objects.filter(id=keeper_id).first()
    if keeper is None:
        raise NotFoundError("Keeper not found", code="KEEPER_NOT_FOUND")
    return keeper


def _validate_choices(*, seal_type: str | None, shape: str | None) -> None:
    errors = {}
    if seal_type is not None and seal_type not in SealType.values:
        errors["type"] = [f"must be one of {SealType.values}"]
    if shape is not None and shape not in SealShape.values:
        errors["shape"] = [f"must be one of {SealShape.values}"]
    if errors:
        raise ValidationError("Invalid seal descriptor", errors=errors)


@transaction.atomic
def seal_create(
    *,
    created_by: User,
    name: str,
    seal_type: str,
    keeper_id: uuid.UUID,
    shape: str = SealShape.ROUND,
    owner_department: str = "",
    keeper_department: str = "",
    keeper_phone: str = "",
    description: str = "",
    location: str = "",
) -> Seal:
    """Enregistrement direct d'un sceau par un administrateur"""
    ensure_admin(created_by)

    if not (name or "").strip():
        raise ValidationError("name is required", errors={"name": ["required"]})
    _validate_choices(seal_type=seal_type, shape=shape)
    keeper = _resolve_keeper(keeper_id)

    seal = Seal.objects.create(
        name=name.strip(),
        type=seal_type,
        shape=shape,
        status=SealStatus.IN_USE,
        owner_department=owner_department,
        keeper_department=keeper_department or keeper.department,
        keeper=keeper,
        keeper_phone=keeper_phone or keeper.phone,
        description=description,
        location=location,
    )

    audit_action_create(
        user=created_by,
        action=AuditAction.SEAL_CREATED,
        category=AuditCategory.SEAL,
        details={"name": seal.name, "type": seal.type, "keeper": keeper.username},
        target_type="seal",
        target_id=str(seal.id),
    )
    logger.info("seal.created", seal_id=str(seal.id), keeper_id=str(keeper.id))
    return seal


def seal_create_from_application(*, application) -> Seal:
    """
    Produit le sceau d'une demande de création approuvée.
    Must run inside the caller's atomic block; source_application is unique.
    """
    seal = Seal.objects.create(
        name=application.seal_name,
        type=application.seal_type,
        shape=application.seal_shape or SealShape.ROUND,
        status=SealStatus.IN_USE,
        owner_department=application.owner_department,
        keeper_department=application.keeper_department,
        keeper_id=application.proposed_keeper_id,
        keeper_phone=application.keeper_phone,
        description=application.purpose,
        source_application=application,
    )
    audit_action_create(
        user=application.approver,
        action=AuditAction.SEAL_CREATED,
        category=AuditCategory.SEAL,
        details={"name": seal.name, "application_no": application.application_no},
        target_type="seal",
        target_id=str(seal.id),
    )
    logger.info("seal.created_from_application", seal_id=str(seal.id), application_no=application.application_no)
    return seal


@transaction.atomic
def seal_update(*, seal_id: uuid.UUID, updated_by: User, **changes) -> Seal:
    ensure_admin(updated_by)
    seal = selectors.seal_get(seal_id=seal_id)

    _validate_choices(seal_type=changes.get("type"), shape=changes.get("shape"))

    keeper_id = changes.pop("keeper_id", None)
    if keeper_id is not None:
        seal.keeper = _resolve_keeper(keeper_id)

    unknown = set(changes) - set(SEAL_EDITABLE_FIELDS)
    if unknown:
        raise ValidationError("Unknown or immutable fields", errors={f: ["not editable"] for f in sorted(unknown)})

    for field, value in changes.items():
        if value is not None:
            setattr(seal, field, value)

    if not (seal.name or "").strip():
        raise ValidationError("name is required", errors={"name": ["required"]})

    seal.save()
    audit_action_create(
        user=updated_by,
        action=AuditAction.SEAL_UPDATED,
        category=AuditCategory.SEAL,
        details={"fields": sorted(changes), "keeper_changed": keeper_id is not None},
        target_type="seal",
        target_id=str(seal.id),
    )
    return seal


@transaction.atomic
def seal_update_status(*, seal_id: uuid.UUID, updated_by: User, status: str, reason: str = "") -> Seal:
    ensure_admin(updated_by)
    if status not in SealStatus.values:
        raise ValidationError("Invalid seal status", errors={"status": [f"must be one of {SealStatus.values}"]})

    seal = Seal.objects.select_for_update().filter(id=seal_id).first()
    if seal is None:
        raise NotFoundError("Seal not found", code="SEAL_NOT_FOUND")

    previous = seal.status
    if previous == status:
        return seal
    if previous == SealStatus.DESTROYED:
        raise InvalidStateError("A destroyed seal cannot change status")

    seal.status = status
    seal.save(update_fields=["status", "updated_at"])

    audit_action_create(
        user=updated_by,
        action=AuditAction.SEAL_STATUS_CHANGED,
        category=AuditCategory.SEAL,
        details={"from": previous, "to": status, "reason": reason},
        target_type="seal",
        target_id=str(seal.id),
    )
    logger.info("seal.status_changed", seal_id=str(seal.id), previous=previous, status=status)
    return seal


@transaction.atomic
def seal_delete(*, seal_id: uuid.UUID, deleted_by: User) -> None:
    ensure_admin(deleted_by)
    seal = selectors.seal_get(seal_id=seal_id)

    if selectors.seal_is_referenced(seal=seal):
        raise InvalidStateError(
            "Seal is referenced by applications and cannot be deleted; change its status instead",
            code="SEAL_REFERENCED",
        )

    seal_name, seal_pk = seal.name, str(seal.id)
    seal.delete()
    audit_action_create(
        user=deleted_by,
        action=AuditAction.SEAL_DELETED,
        category=AuditCategory.SEAL,
        details={"name": seal_name},
        target_type="seal",
        target_id=seal_pk,
    )
