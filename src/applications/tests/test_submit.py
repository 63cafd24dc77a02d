import uuid

import pytest

from src.applications import services
from src.applications.models import Application, ApplicationKind, ApplicationStatus
from src.auditaction.models import AuditAction, AuditLog
from src.core.exceptions import NotFoundError, ValidationError
from src.seals.models import SealStatus

pytestmark = pytest.mark.django_db


def test_submit_usage_application_starts_pending(bob, seal, submit_usage):
    app = submit_usage(bob, seal, file_name="contract.pdf", copies=2)

    assert app.status == ApplicationStatus.PENDING
    assert app.kind == ApplicationKind.USAGE
    assert app.version == 1
    assert app.applicant == bob
    assert app.applicant_department == "Sales"
    assert app.apply_time is not None
    assert app.approver is None and app.approve_time is None
    assert app.application_no.startswith("YY")
    assert app.copies == 2


def test_submit_writes_audit_entry(bob, seal, submit_usage):
    app = submit_usage(bob, seal)

    entry = AuditLog.objects.get(action=AuditAction.APPLICATION_SUBMITTED)
    assert entry.target_id == str(app.id)
    assert entry.details["application_no"] == app.application_no


def test_submit_creation_application(bob, alice, submit_creation):
    app = submit_creation(bob, alice)

    assert app.kind == ApplicationKind.CREATION
    assert app.application_no.startswith("SC")
    assert app.proposed_keeper == alice
    assert app.keeper_department == alice.department
    assert app.seal is None


def test_submit_reports_every_missing_field(bob):
    with pytest.raises(ValidationError) as exc:
        services.application_submit(applicant=bob, kind=ApplicationKind.USAGE, purpose="  ", applicant_department="")

    # department falls back to bob's own department
    assert set(exc.value.errors) == {"purpose", "seal_id"}
    assert Application.objects.count() == 0


def test_submit_without_any_department_fails(make_user, seal):
    nobody = make_user("nodept", department="")
    with pytest.raises(ValidationError) as exc:
        services.application_submit(applicant=nobody, kind=ApplicationKind.USAGE, purpose="x", seal_id=seal.id)
    assert "applicant_department" in exc.value.errors


def test_submit_creation_requires_seal_descriptor(bob):
    with pytest.raises(ValidationError) as exc:
        services.application_submit(applicant=bob, kind=ApplicationKind.CREATION, purpose="New seal")
    assert set(exc.value.errors) == {"seal_name", "seal_type", "seal_shape", "proposed_keeper_id"}


def test_submit_rejects_unknown_kind(bob):
    with pytest.raises(ValidationError):
        services.application_submit(applicant=bob, kind="LOAN", purpose="x")


@pytest.mark.parametrize("status", [SealStatus.DESTROYED, SealStatus.LOST])
def test_submit_refuses_unusable_seal(bob, alice, make_seal, submit_usage, status):
    broken = make_seal(keeper=alice, name="Old seal", status=status)

    with pytest.raises(ValidationError) as exc:
        submit_usage(bob, broken)

    assert exc.value.code == "SEAL_NOT_USABLE"
    assert Application.objects.count() == 0


def test_submit_allows_suspended_seal(bob, alice, make_seal, submit_usage):
    suspended = make_seal(keeper=alice, name="Paused seal", status=SealStatus.SUSPENDED)
    app = submit_usage(bob, suspended)
    assert app.status == ApplicationStatus.PENDING


def test_submit_unknown_seal_is_not_found(bob):
    with pytest.raises(NotFoundError):
        services.application_submit(applicant=bob, kind=ApplicationKind.USAGE, purpose="x", seal_id=uuid.uuid4())


def test_submit_unknown_keeper_is_not_found(bob):
    with pytest.raises(NotFoundError):
        services.application_submit(
            applicant=bob,
            kind=ApplicationKind.CREATION,
            purpose="x",
            seal_name="Seal",
            seal_type="HR",
            seal_shape="ROUND",
            proposed_keeper_id=uuid.uuid4(),
        )


def test_submit_rejects_zero_copies(bob, seal, submit_usage):
    with pytest.raises(ValidationError) as exc:
        submit_usage(bob, seal, copies=0)
    assert "copies" in exc.value.errors
