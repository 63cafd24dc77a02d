import uuid
from datetime import timedelta

import pytest
from django.utils import timezone

from src.applications.models import Application, ApplicationStatus

pytestmark = pytest.mark.django_db


def _post(client, url, payload):
    return client.post(url, data=payload, content_type="application/json")


def test_requests_without_token_are_rejected(client):
    response = client.get("/api/applications/")
    assert response.status_code == 401


def test_submit_then_list_my_applications(client_for, bob, seal):
    client = client_for(bob)

    created = _post(client, "/api/applications/", {
        "kind": "usage",
        "purpose": "Sign the lease",
        "seal_id": str(seal.id),
        "file_name": "lease.pdf",
        "copies": 2,
    })

    assert created.status_code == 201
    body = created.json()
    assert body["success"] is True
    assert body["data"]["application_no"].startswith("YY")

    listed = client.get("/api/applications/", {"scope": "my"}).json()
    assert listed["data"]["total"] == 1
    item = listed["data"]["list"][0]
    assert item["application_no"] == body["data"]["application_no"]
    assert item["status"] == ApplicationStatus.PENDING
    assert item["seal"]["name"] == seal.name
    assert item["copies"] == 2
    assert listed["data"]["pagination"]["page"] == 1


def test_submit_validation_envelope(client_for, bob):
    response = _post(client_for(bob), "/api/applications/", {"kind": "loan", "purpose": "x"})

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "VALIDATION_ERROR"
    assert set(body) == {"success", "message", "data", "extra", "errors", "code", "request_id"}


def test_pending_scope_lists_what_the_keeper_can_decide(client_for, alice, bob, seal, submit_usage, submit_creation):
    submit_usage(bob, seal)
    submit_creation(bob, alice)

    listed = client_for(alice).get("/api/applications/", {"scope": "pending"}).json()

    assert listed["data"]["total"] == 1
    assert listed["data"]["list"][0]["kind"] == "USAGE"


def test_decide_by_keeper(client_for, alice, bob, seal, submit_usage):
    app = submit_usage(bob, seal)

    response = _post(client_for(alice), f"/api/applications/{app.id}/decide", {
        "decision": "approved",
        "remark": "ok",
    })

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == ApplicationStatus.APPROVED
    assert data["approver"]["id"] == str(alice.id)
    assert data["approve_remark"] == "ok"


def test_decide_forbidden_envelope(client_for, bob, carol, seal, submit_usage):
    app = submit_usage(bob, seal)

    response = _post(client_for(carol), f"/api/applications/{app.id}/decide", {"decision": "APPROVED"})

    assert response.status_code == 403
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "FORBIDDEN"
    assert Application.objects.get(pk=app.pk).status == ApplicationStatus.PENDING


def test_decide_twice_is_invalid_state(client_for, alice, bob, seal, submit_usage):
    app = submit_usage(bob, seal)
    client = client_for(alice)
    _post(client, f"/api/applications/{app.id}/decide", {"decision": "REJECTED"})

    response = _post(client, f"/api/applications/{app.id}/decide", {"decision": "APPROVED"})

    assert response.status_code == 409
    assert response.json()["code"] == "INVALID_STATE"


def test_unknown_application_is_404(client_for, admin_user):
    response = client_for(admin_user).get(f"/api/applications/{uuid.uuid4()}")

    assert response.status_code == 404
    assert response.json()["code"] == "APPLICATION_NOT_FOUND"


def test_detail_carries_permissions(client_for, alice, bob, carol, seal, submit_usage):
    app = submit_usage(bob, seal)

    as_applicant = client_for(bob).get(f"/api/applications/{app.id}").json()["data"]
    as_keeper = client_for(alice).get(f"/api/applications/no/{app.application_no}").json()["data"]

    assert as_applicant["permissions"] == {"can_decide": False, "can_withdraw": True, "can_update": True}
    assert as_keeper["permissions"] == {"can_decide": True, "can_withdraw": False, "can_update": False}
    assert client_for(carol).get(f"/api/applications/{app.id}").status_code == 403


def test_withdraw_and_update_endpoints(client_for, bob, seal, submit_usage):
    app = submit_usage(bob, seal)
    client = client_for(bob)

    patched = client.patch(
        f"/api/applications/{app.id}",
        data={"purpose": "Sign the amended lease", "copies": 3},
        content_type="application/json",
    )
    assert patched.status_code == 200
    assert patched.json()["data"]["purpose"] == "Sign the amended lease"
    assert patched.json()["data"]["version"] == app.version + 1

    withdrawn = _post(client, f"/api/applications/{app.id}/withdraw", {})
    assert withdrawn.status_code == 200
    assert withdrawn.json()["data"]["status"] == ApplicationStatus.WITHDRAWN


def test_batch_decide_endpoint(client_for, admin_user, bob, seal, submit_usage):
    first = submit_usage(bob, seal)
    second = submit_usage(bob, seal)

    response = _post(client_for(admin_user), "/api/applications/batch-decide", {
        "application_ids": [str(first.id), str(second.id), str(uuid.uuid4())],
        "decision": "APPROVED",
    })

    assert response.status_code == 200
    data = response.json()["data"]
    assert sorted(data["succeeded"]) == sorted([str(first.id), str(second.id)])
    assert [f["code"] for f in data["failed"]] == ["APPLICATION_NOT_FOUND"]


def test_statistics_endpoints(client_for, admin_user, alice, bob, seal, submit_usage):
    app = submit_usage(bob, seal)
    submit_usage(bob, seal)
    client = client_for(alice)
    _post(client, f"/api/applications/{app.id}/decide", {"decision": "APPROVED"})

    counts = client.get("/api/statistics/counts", {"scope": "keeper"}).json()["data"]
    assert counts["total"] == 2
    assert counts["APPROVED"] == 1

    durations = client.get("/api/statistics/durations", {"scope": "keeper"}).json()["data"]
    assert durations["has_data"] is True
    assert durations["sample_size"] == 1

    trend = client.get("/api/statistics/monthly-trend", {"scope": "keeper", "months": 2}).json()["data"]["list"]
    assert len(trend) == 2
    assert trend[-1]["total"] == 2

    usage = client.get("/api/statistics/seal-usage", {"scope": "keeper"}).json()["data"]["list"]
    assert usage[0]["percentage_of_total"] == 100.0


def test_statistics_all_scope_is_admin_only(client_for, admin_user, bob):
    assert client_for(bob).get("/api/statistics/counts", {"scope": "all"}).status_code == 403
    assert client_for(admin_user).get("/api/statistics/counts", {"scope": "all"}).status_code == 200


def test_monthly_trend_out_of_range(client_for, bob):
    response = client_for(bob).get("/api/statistics/monthly-trend", {"months": 0})

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_upcoming_lists_approved_use_in_window(client_for, alice, bob, carol, seal, submit_usage):
    soon = submit_usage(bob, seal, expected_time=timezone.now() + timedelta(hours=3))
    later = submit_usage(bob, seal, expected_time=timezone.now() + timedelta(days=3))
    submit_usage(bob, seal, expected_time=timezone.now() + timedelta(hours=2))
    for app in (soon, later):
        _post(client_for(alice), f"/api/applications/{app.id}/decide", {"decision": "APPROVED"})

    listed = client_for(bob).get("/api/applications/upcoming", {"hours": 24}).json()["data"]["list"]

    assert [a["application_no"] for a in listed] == [soon.application_no]
    assert client_for(carol).get("/api/applications/upcoming").json()["data"]["list"] == []
    assert client_for(bob).get("/api/applications/upcoming", {"hours": 0}).status_code == 422


def test_registry_summary_is_admin_only(client_for, admin_user, alice, seal):
    assert client_for(alice).get("/api/statistics/seals").status_code == 403

    summary = client_for(admin_user).get("/api/statistics/seals").json()["data"]
    assert summary["total"] == 1
    assert summary["by_status"]["IN_USE"] == 1
