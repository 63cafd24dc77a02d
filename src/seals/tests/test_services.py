import uuid

import pytest

from src.auditaction.models import AuditAction, AuditLog
from src.core.exceptions import ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from src.seals import selectors, services
from src.seals.models import Seal, SealStatus, SealType

pytestmark = pytest.mark.django_db


def test_create_defaults_keeper_contact(admin_user, make_user):
    keeper = make_user("keeper", department="Finance", phone="+237 600 000 000")

    seal = services.seal_create(created_by=admin_user, name="  Finance seal ", seal_type=SealType.FINANCE,
                                keeper_id=keeper.id)

    assert seal.name == "Finance seal"
    assert seal.status == SealStatus.IN_USE
    assert seal.keeper_department == "Finance"
    assert seal.keeper_phone == "+237 600 000 000"
    assert AuditLog.objects.filter(action=AuditAction.SEAL_CREATED, target_id=str(seal.id)).exists()


def test_create_requires_admin(alice):
    with pytest.raises(ForbiddenError):
        services.seal_create(created_by=alice, name="x", seal_type=SealType.OFFICIAL, keeper_id=alice.id)


def test_create_validates_input(admin_user, alice):
    with pytest.raises(ValidationError):
        services.seal_create(created_by=admin_user, name="Bad", seal_type="STAMP", keeper_id=alice.id)
    with pytest.raises(ValidationError):
        services.seal_create(created_by=admin_user, name=" ", seal_type=SealType.OFFICIAL, keeper_id=alice.id)
    with pytest.raises(NotFoundError) as exc:
        services.seal_create(created_by=admin_user, name="Ok", seal_type=SealType.OFFICIAL, keeper_id=uuid.uuid4())
    assert exc.value.code == "KEEPER_NOT_FOUND"


def test_update_reassigns_keeper(admin_user, carol, seal):
    updated = services.seal_update(seal_id=seal.id, updated_by=admin_user, keeper_id=carol.id, location="Safe B")

    assert updated.keeper_id == carol.id
    assert updated.location == "Safe B"
    assert selectors.seal_keeper_id(seal_id=seal.id) == carol.id


def test_update_rejects_unknown_fields(admin_user, seal):
    with pytest.raises(ValidationError) as exc:
        services.seal_update(seal_id=seal.id, updated_by=admin_user, status=SealStatus.LOST)
    assert "status" in exc.value.errors


def test_status_change_is_audited(admin_user, seal):
    services.seal_update_status(seal_id=seal.id, updated_by=admin_user, status=SealStatus.SUSPENDED, reason="audit")

    log = AuditLog.objects.get(action=AuditAction.SEAL_STATUS_CHANGED)
    assert log.details == {"from": "IN_USE", "to": "SUSPENDED", "reason": "audit"}


def test_destroyed_is_terminal(admin_user, seal):
    services.seal_update_status(seal_id=seal.id, updated_by=admin_user, status=SealStatus.DESTROYED)

    with pytest.raises(InvalidStateError):
        services.seal_update_status(seal_id=seal.id, updated_by=admin_user, status=SealStatus.IN_USE)


def test_delete_unreferenced_seal(admin_user, seal):
    services.seal_delete(seal_id=seal.id, deleted_by=admin_user)

    assert not Seal.objects.filter(pk=seal.pk).exists()
    assert AuditLog.objects.filter(action=AuditAction.SEAL_DELETED, target_id=str(seal.id)).exists()


def test_delete_refuses_referenced_seal(admin_user, bob, seal, submit_usage):
    submit_usage(bob, seal)

    with pytest.raises(InvalidStateError) as exc:
        services.seal_delete(seal_id=seal.id, deleted_by=admin_user)
    assert exc.value.code == "SEAL_REFERENCED"


def test_registry_summary_is_zero_filled(admin_user, alice, make_seal):
    make_seal(keeper=alice)
    make_seal(keeper=alice, name="Lost one", status=SealStatus.LOST, seal_type=SealType.FINANCE)

    summary = selectors.seal_registry_summary()

    assert summary["total"] == 2
    assert summary["by_status"] == {"IN_USE": 1, "DESTROYED": 0, "LOST": 1, "SUSPENDED": 0}
    assert summary["by_type"]["FINANCE"] == 1
    assert summary["by_type"]["HR"] == 0
