from datetime import datetime, timedelta, timezone as dt_timezone

import pytest
from freezegun import freeze_time

from src.applications import services, statistics
from src.applications.statistics import bucket_for, format_duration, summarize_durations

T0 = datetime(2026, 2, 10, 8, 0, tzinfo=dt_timezone.utc)


def _decide_after(app, actor, delay: timedelta, decision="APPROVED"):
    with freeze_time(T0 + delay):
        return services.application_decide(application_id=app.id, actor=actor, decision=decision)


@pytest.mark.parametrize(
    "seconds, bucket",
    [
        (59 * 60, "within_1_hour"),
        (3600, "within_1_hour"),
        (61 * 60, "within_1_day"),
        (86400, "within_1_day"),
        (86401, "within_3_days"),
        (3 * 86400, "within_3_days"),
        (5 * 86400, "within_7_days"),
        (7 * 86400 + 1, "more_than_7_days"),
    ],
)
def test_bucket_boundaries(seconds, bucket):
    assert bucket_for(seconds) == bucket


def test_format_duration():
    assert format_duration(45 * 60) == "45m"
    assert format_duration(2 * 3600) == "2h"
    assert format_duration(2 * 3600 + 5 * 60) == "2h 5m"
    assert format_duration(3 * 86400 + 4 * 3600 + 59) == "3d 4h"


def test_summarize_without_samples_is_explicit_no_data():
    result = summarize_durations([], excluded=2)

    assert result["has_data"] is False
    assert result["sample_size"] == 0
    assert result["excluded"] == 2
    assert result["average_duration"] is None
    assert result["fastest_approval"] is None
    assert result["slowest_approval"] is None
    assert set(result["duration_buckets"].values()) == {0}
    assert list(result["duration_buckets"]) == [
        "within_1_hour",
        "within_1_day",
        "within_3_days",
        "within_7_days",
        "more_than_7_days",
    ]


def test_summarize_breaks_ties_by_application_no():
    result = summarize_durations([("YY2", 600.0), ("YY1", 600.0), ("YY3", 900.0), ("YY0", 900.0)])

    assert result["fastest_approval"]["application_no"] == "YY1"
    assert result["slowest_approval"]["application_no"] == "YY0"
    assert result["average_duration"]["seconds"] == 750.0
    assert sum(result["duration_buckets"].values()) == result["sample_size"] == 4


@pytest.mark.django_db
def test_duration_statistics_on_empty_store(admin_user):
    result = statistics.duration_statistics(actor=admin_user, scope="all")

    assert result["has_data"] is False
    assert result["average_duration"] is None


@pytest.mark.django_db
def test_pending_and_withdrawn_applications_are_not_measured(admin_user, bob, seal, submit_usage):
    with freeze_time(T0):
        submit_usage(bob, seal)
        withdrawn = submit_usage(bob, seal)
        services.application_withdraw(application_id=withdrawn.id, actor=bob)

    result = statistics.duration_statistics(actor=admin_user, scope="all")

    assert result["has_data"] is False


@pytest.mark.django_db
def test_durations_land_in_expected_buckets(admin_user, alice, bob, seal, submit_usage):
    with freeze_time(T0):
        quick = submit_usage(bob, seal)
        slower = submit_usage(bob, seal)
        slowest = submit_usage(bob, seal)

    _decide_after(quick, alice, timedelta(minutes=59))
    _decide_after(slower, alice, timedelta(minutes=61), decision="REJECTED")
    _decide_after(slowest, admin_user, timedelta(days=8))

    result = statistics.duration_statistics(actor=admin_user, scope="all")

    assert result["has_data"] is True
    assert result["sample_size"] == 3
    assert result["duration_buckets"] == {
        "within_1_hour": 1,
        "within_1_day": 1,
        "within_3_days": 0,
        "within_7_days": 0,
        "more_than_7_days": 1,
    }
    assert result["fastest_approval"]["application_no"] == quick.application_no
    assert result["fastest_approval"]["seconds"] == 59 * 60
    assert result["slowest_approval"]["application_no"] == slowest.application_no
    assert result["slowest_approval"]["text"] == "8d"


@pytest.mark.django_db
def test_keeper_scope_only_sees_own_seals(alice, carol, bob, seal, make_seal, submit_usage):
    other = make_seal(keeper=carol, name="Sales seal")
    with freeze_time(T0):
        mine = submit_usage(bob, seal)
        theirs = submit_usage(bob, other)
    _decide_after(mine, alice, timedelta(minutes=10))
    _decide_after(theirs, carol, timedelta(days=2))

    result = statistics.duration_statistics(actor=alice, scope="keeper")

    assert result["sample_size"] == 1
    assert result["duration_buckets"]["within_1_hour"] == 1
