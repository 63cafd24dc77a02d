from __future__ import annotations

from typing import Any

from django.db.models import Count, Q, QuerySet
from django.utils.dateparse import parse_datetime

from src.auditaction.models import AuditLog
from src.core.exceptions import ValidationError


def _parse_dt(value: str | None, field: str):
    if not value:
        return None
    dt = parse_datetime(value)
    if dt is None:
        raise ValidationError(f"{field} must be an ISO-8601 datetime", errors={field: ["invalid datetime"]})
    return dt


def audit_actions_queryset(
    *,
    category: str | None = None,
    action: str | None = None,
    user_id: str | None = None,
    target_type: str | None = None,
    target_id: str | None = None,
    date_from: str | None = None,
    date_to: str | None = None,
    q: str | None = None,
) -> QuerySet[AuditLog]:
    qs = AuditLog.objects.select_related("user")

    if category:
        qs = qs.filter(category=category)
    if action:
        qs = qs.filter(action__icontains=action)
    if user_id:
        qs = qs.filter(user_id=user_id)
    if target_type:
        qs = qs.filter(target_type=target_type)
    if target_id:
        qs = qs.filter(target_id=target_id)

    df = _parse_dt(date_from, "date_from")
    dt = _parse_dt(date_to, "date_to")
    if df:
        qs = qs.filter(created_at__gte=df)
    if dt:
        qs = qs.filter(created_at__lte=dt)

    if q:
        qs = qs.filter(
            Q(action__icontains=q)
            | Q(user__username__icontains=q)
            | Q(target_type__icontains=q)
        )

    return qs.order_by("-created_at")


def audit_stats_by_category(*, date_from: str | None = None, date_to: str | None = None) -> list[dict[str, Any]]:
    qs = audit_actions_queryset(date_from=date_from, date_to=date_to)
    return list(qs.values("category").annotate(count=Count("id")).order_by("-count", "category"))
