import pytest
from django.core import mail

from src.applications import notifications, services
from src.auditaction.models import AuditAction, AuditLog

pytestmark = pytest.mark.django_db


def test_usage_submission_notifies_the_keeper(django_capture_on_commit_callbacks, bob, seal, submit_usage):
    with django_capture_on_commit_callbacks(execute=True):
        app = submit_usage(bob, seal)

    assert len(mail.outbox) == 1
    message = mail.outbox[0]
    assert message.to == [seal.keeper.email]
    assert app.application_no in message.subject
    assert AuditLog.objects.filter(action=AuditAction.EMAIL_QUEUED, target_id=str(app.id)).exists()


def test_creation_submission_notifies_admins(django_capture_on_commit_callbacks, admin_user, alice, bob, submit_creation):
    with django_capture_on_commit_callbacks(execute=True):
        submit_creation(bob, alice)

    assert len(mail.outbox) == 1
    assert mail.outbox[0].to == [admin_user.email]


def test_decision_notifies_the_applicant(django_capture_on_commit_callbacks, alice, bob, seal, submit_usage):
    app = submit_usage(bob, seal)

    with django_capture_on_commit_callbacks(execute=True):
        services.application_decide(application_id=app.id, actor=alice, decision="REJECTED", remark="Wrong seal")

    assert len(mail.outbox) == 1
    message = mail.outbox[0]
    assert message.to == [bob.email]
    assert "rejected" in message.subject
    html, mimetype = message.alternatives[0]
    assert mimetype == "text/html"
    assert "Wrong seal" in html


def test_no_email_before_commit(django_capture_on_commit_callbacks, bob, seal, submit_usage):
    with django_capture_on_commit_callbacks(execute=False) as callbacks:
        submit_usage(bob, seal)

    assert len(callbacks) == 1
    assert mail.outbox == []


def test_failed_email_is_audited_and_transition_stands(
    django_capture_on_commit_callbacks, monkeypatch, alice, bob, seal, submit_usage
):
    app = submit_usage(bob, seal)

    def _boom(payload):
        raise ConnectionRefusedError("smtp down")

    monkeypatch.setattr(notifications.send_email_task, "delay", _boom)

    with django_capture_on_commit_callbacks(execute=True):
        decided = services.application_decide(application_id=app.id, actor=alice, decision="APPROVED")

    assert decided.status == "APPROVED"
    failure = AuditLog.objects.get(action=AuditAction.EMAIL_SEND_FAILED)
    assert failure.target_id == str(app.id)
    assert failure.details["error"] == "smtp down"


def test_notifications_can_be_disabled(django_capture_on_commit_callbacks, settings, bob, seal, submit_usage):
    settings.SEAL_NOTIFICATIONS_ENABLED = False

    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        submit_usage(bob, seal)

    assert callbacks == []
    assert mail.outbox == []
