from datetime import datetime, timezone as dt_timezone

import pytest
from freezegun import freeze_time

from src.applications import services, statistics
from src.core.exceptions import ForbiddenError, ValidationError

pytestmark = pytest.mark.django_db


def test_counts_by_status(admin_user, alice, bob, seal, submit_usage, submit_creation):
    approved = submit_usage(bob, seal)
    rejected = submit_usage(bob, seal)
    withdrawn = submit_usage(bob, seal)
    submit_creation(bob, alice)
    services.application_decide(application_id=approved.id, actor=alice, decision="APPROVED")
    services.application_decide(application_id=rejected.id, actor=alice, decision="REJECTED")
    services.application_withdraw(application_id=withdrawn.id, actor=bob)

    counts = statistics.counts_by_status(actor=bob, scope="my")

    assert counts == {"total": 4, "PENDING": 1, "APPROVED": 1, "REJECTED": 1, "WITHDRAWN": 1}
    assert statistics.counts_by_status(actor=bob, scope="my", kind="CREATION")["total"] == 1
    assert statistics.counts_by_status(actor=alice, scope="keeper")["total"] == 3
    assert statistics.counts_by_status(actor=alice, scope="my")["total"] == 0


def test_all_scope_requires_admin(bob):
    with pytest.raises(ForbiddenError):
        statistics.counts_by_status(actor=bob, scope="all")


def test_unknown_scope_is_rejected(bob):
    with pytest.raises(ValidationError):
        statistics.counts_by_status(actor=bob, scope="everything")


def test_department_breakdown(admin_user, alice, bob, carol, make_user, seal, submit_usage):
    dave = make_user("dave", department="Finance")
    a1 = submit_usage(bob, seal)
    a2 = submit_usage(carol, seal)
    submit_usage(bob, seal)
    f1 = submit_usage(dave, seal)
    services.application_decide(application_id=a1.id, actor=alice, decision="APPROVED")
    services.application_decide(application_id=a2.id, actor=alice, decision="REJECTED")
    services.application_decide(application_id=f1.id, actor=alice, decision="APPROVED")

    rows = statistics.department_breakdown(actor=admin_user, scope="all")

    assert rows == [
        {"department": "Sales", "total": 3, "approved": 1, "rejected": 1},
        {"department": "Finance", "total": 1, "approved": 1, "rejected": 0},
    ]
    for row in rows:
        assert row["approved"] + row["rejected"] <= row["total"]


def test_department_breakdown_ties_sorted_by_name(admin_user, make_user, seal, submit_usage):
    submit_usage(make_user("zed", department="Zeta"), seal)
    submit_usage(make_user("amy", department="Alpha"), seal)

    rows = statistics.department_breakdown(actor=admin_user, scope="all")

    assert [r["department"] for r in rows] == ["Alpha", "Zeta"]


def test_monthly_trend_is_zero_filled_oldest_first(admin_user, alice, bob, seal, submit_usage):
    with freeze_time(datetime(2025, 12, 15, tzinfo=dt_timezone.utc)):
        old = submit_usage(bob, seal)
        services.application_decide(application_id=old.id, actor=alice, decision="APPROVED")
    with freeze_time(datetime(2026, 2, 3, tzinfo=dt_timezone.utc)):
        submit_usage(bob, seal)
        rejected = submit_usage(bob, seal)
        services.application_decide(application_id=rejected.id, actor=alice, decision="REJECTED")
    # outside the window
    with freeze_time(datetime(2025, 10, 31, tzinfo=dt_timezone.utc)):
        submit_usage(bob, seal)

    with freeze_time(datetime(2026, 2, 20, tzinfo=dt_timezone.utc)):
        rows = statistics.monthly_trend(actor=admin_user, months=3, scope="all")

    assert rows == [
        {"month": "2025-12", "total": 1, "approved": 1, "rejected": 0},
        {"month": "2026-01", "total": 0, "approved": 0, "rejected": 0},
        {"month": "2026-02", "total": 2, "approved": 0, "rejected": 1},
    ]


@pytest.mark.parametrize("months", [0, 37, -1])
def test_monthly_trend_bounds(admin_user, months):
    with pytest.raises(ValidationError):
        statistics.monthly_trend(actor=admin_user, months=months, scope="all")


def test_monthly_trend_on_empty_store(bob):
    rows = statistics.monthly_trend(actor=bob, months=1)
    assert len(rows) == 1
    assert rows[0]["total"] == 0


def test_seal_usage_ranking(admin_user, alice, bob, seal, make_seal, submit_usage, submit_creation):
    contract = make_seal(keeper=alice, name="Contract seal")
    finance = make_seal(keeper=alice, name="Finance seal")
    for _ in range(2):
        submit_usage(bob, seal)
        submit_usage(bob, contract)
    submit_usage(bob, finance)
    withdrawn = submit_usage(bob, finance)
    services.application_withdraw(application_id=withdrawn.id, actor=bob)
    submit_creation(bob, alice)

    rows = statistics.seal_usage_ranking(actor=admin_user, scope="all")

    assert [(r["seal_name"], r["usage_count"]) for r in rows] == [
        ("Company seal", 2),
        ("Contract seal", 2),
        ("Finance seal", 1),
    ]
    assert [r["percentage_of_total"] for r in rows] == [40.0, 40.0, 20.0]


def test_seal_usage_ranking_empty(admin_user):
    assert statistics.seal_usage_ranking(actor=admin_user, scope="all") == []
