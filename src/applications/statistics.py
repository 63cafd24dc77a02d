"""
Indicateurs calculés à la lecture sur les demandes (aucune écriture).

Every breakdown row comes from a single grouped query, so
approved + rejected <= total always holds within a row.
"""
from __future__ import annotations

from datetime import datetime
from typing import Iterable

from django.conf import settings
from django.db.models import Count, Q, QuerySet
from django.db.models.functions import TruncMonth
from django.utils import timezone

from src.applications.models import (
    DECIDED_STATUSES,
    Application,
    ApplicationKind,
    ApplicationStatus,
)
from src.core.db import store_guard
from src.core.exceptions import ValidationError
from src.core.policies import ensure_admin

STAT_SCOPES = ("my", "keeper", "all")

HOUR = 3600
DAY = 24 * HOUR

# Upper bounds are inclusive: exactly one hour lands in within_1_hour
DURATION_BUCKETS = (
    ("within_1_hour", HOUR),
    ("within_1_day", DAY),
    ("within_3_days", 3 * DAY),
    ("within_7_days", 7 * DAY),
)
OVERFLOW_BUCKET = "more_than_7_days"


def scoped_queryset(*, actor, scope: str = "my", kind: str | None = None) -> QuerySet[Application]:
    if scope == "my":
        qs = Application.objects.filter(applicant_id=actor.pk)
    elif scope == "keeper":
        qs = Application.objects.filter(kind=ApplicationKind.USAGE, seal__keeper_id=actor.pk)
    elif scope == "all":
        ensure_admin(actor)
        qs = Application.objects.all()
    else:
        raise ValidationError(f"scope must be one of {list(STAT_SCOPES)}", errors={"scope": ["invalid"]})

    if kind:
        if kind not in ApplicationKind.values:
            raise ValidationError("Unknown application kind", errors={"kind": [f"must be one of {ApplicationKind.values}"]})
        qs = qs.filter(kind=kind)
    return qs


def format_duration(seconds: float) -> str:
    """45m, 2h 5m, 3d 4h"""
    minutes = int(seconds // 60)
    if minutes < 60:
        return f"{minutes}m"
    if minutes < 1440:
        hours, rest = divmod(minutes, 60)
        return f"{hours}h {rest}m" if rest else f"{hours}h"
    days, rest = divmod(minutes, 1440)
    hours = rest // 60
    return f"{days}d {hours}h" if hours else f"{days}d"


def bucket_for(seconds: float) -> str:
    for name, upper in DURATION_BUCKETS:
        if seconds <= upper:
            return name
    return OVERFLOW_BUCKET


def _duration_entry(application_no: str, seconds: float) -> dict:
    return {"application_no": application_no, "seconds": seconds, "text": format_duration(seconds)}


def summarize_durations(samples: Iterable[tuple[str, float]], *, excluded: int = 0) -> dict:
    """
    Agrégat pur sur des couples (application_no, durée en secondes).
    With no samples the result says so explicitly (has_data False, no average).
    """
    buckets = {name: 0 for name, _ in DURATION_BUCKETS}
    buckets[OVERFLOW_BUCKET] = 0

    ordered = sorted(samples, key=lambda s: (s[1], s[0]))
    if not ordered:
        return {
            "has_data": False,
            "sample_size": 0,
            "excluded": excluded,
            "average_duration": None,
            "fastest_approval": None,
            "slowest_approval": None,
            "duration_buckets": buckets,
        }

    for _, seconds in ordered:
        buckets[bucket_for(seconds)] += 1

    average = sum(seconds for _, seconds in ordered) / len(ordered)
    fastest = ordered[0]
    # slowest: largest duration, smallest application_no among equals
    slowest = min(ordered, key=lambda s: (-s[1], s[0]))

    return {
        "has_data": True,
        "sample_size": len(ordered),
        "excluded": excluded,
        "average_duration": {"seconds": round(average, 2), "text": format_duration(average)},
        "fastest_approval": _duration_entry(*fastest),
        "slowest_approval": _duration_entry(*slowest),
        "duration_buckets": buckets,
    }


@store_guard("statistics.counts_by_status")
def counts_by_status(*, actor, scope: str = "my", kind: str | None = None) -> dict:
    counts = {status.value: 0 for status in ApplicationStatus}
    rows = scoped_queryset(actor=actor, scope=scope, kind=kind).values("status").annotate(c=Count("id")).order_by()
    for row in rows:
        counts[row["status"]] = row["c"]
    return {"total": sum(counts.values()), **counts}


@store_guard("statistics.duration_statistics")
def duration_statistics(*, actor, scope: str = "my", kind: str | None = None) -> dict:
    rows = (
        scoped_queryset(actor=actor, scope=scope, kind=kind)
        .filter(status__in=DECIDED_STATUSES)
        .values_list("application_no", "apply_time", "approve_time")
    )

    samples = []
    excluded = 0
    for application_no, apply_time, approve_time in rows:
        if apply_time is None or approve_time is None or approve_time < apply_time:
            excluded += 1
            continue
        samples.append((application_no, (approve_time - apply_time).total_seconds()))

    return summarize_durations(samples, excluded=excluded)


@store_guard("statistics.department_breakdown")
def department_breakdown(*, actor, scope: str = "my", kind: str | None = None) -> list[dict]:
    rows = (
        scoped_queryset(actor=actor, scope=scope, kind=kind)
        .values("applicant_department")
        .annotate(
            total=Count("id"),
            approved=Count("id", filter=Q(status=ApplicationStatus.APPROVED)),
            rejected=Count("id", filter=Q(status=ApplicationStatus.REJECTED)),
        )
        .order_by("-total", "applicant_department")
    )
    return [
        {
            "department": row["applicant_department"],
            "total": row["total"],
            "approved": row["approved"],
            "rejected": row["rejected"],
        }
        for row in rows
    ]


def _recent_months(months: int, today) -> list[tuple[int, int]]:
    year, month = today.year, today.month
    out = []
    for _ in range(months):
        out.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return list(reversed(out))


@store_guard("statistics.monthly_trend")
def monthly_trend(*, actor, months: int = 6, scope: str = "my", kind: str | None = None) -> list[dict]:
    max_months = settings.SEAL_APPLICATION_MONTHLY_TREND_MAX
    if not isinstance(months, int) or not 1 <= months <= max_months:
        raise ValidationError(f"months must be between 1 and {max_months}", errors={"months": ["out of range"]})

    window = _recent_months(months, timezone.localdate())
    first_year, first_month = window[0]
    start = timezone.make_aware(datetime(first_year, first_month, 1))

    rows = (
        scoped_queryset(actor=actor, scope=scope, kind=kind)
        .filter(apply_time__gte=start)
        .annotate(month=TruncMonth("apply_time"))
        .values("month")
        .annotate(
            total=Count("id"),
            approved=Count("id", filter=Q(status=ApplicationStatus.APPROVED)),
            rejected=Count("id", filter=Q(status=ApplicationStatus.REJECTED)),
        )
        .order_by("month")
    )
    by_month = {}
    for row in rows:
        m = row["month"]
        by_month[(m.year, m.month)] = row

    result = []
    for year, month in window:
        row = by_month.get((year, month))
        result.append({
            "month": f"{year:04d}-{month:02d}",
            "total": row["total"] if row else 0,
            "approved": row["approved"] if row else 0,
            "rejected": row["rejected"] if row else 0,
        })
    return result


@store_guard("statistics.seal_usage_ranking")
def seal_usage_ranking(*, actor, scope: str = "my") -> list[dict]:
    rows = list(
        scoped_queryset(actor=actor, scope=scope, kind=ApplicationKind.USAGE)
        .exclude(status=ApplicationStatus.WITHDRAWN)
        .values("seal_id", "seal__name")
        .annotate(usage_count=Count("id"))
        .order_by("-usage_count", "seal__name", "seal_id")
    )
    total = sum(row["usage_count"] for row in rows)
    if not total:
        return []

    return [
        {
            "seal_id": row["seal_id"],
            "seal_name": row["seal__name"],
            "usage_count": row["usage_count"],
            "percentage_of_total": round(row["usage_count"] * 100 / total, 2),
        }
        for row in rows
    ]
