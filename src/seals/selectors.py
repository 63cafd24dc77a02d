import uuid

from django.db.models import Count, Q, QuerySet

from src.core.exceptions import NotFoundError
from src.seals.models import Seal, SealStatus, SealType


def seal_list(*, keyword: str | None = None, status: str | None = None, seal_type: str | None = None,
              keeper_id: uuid.UUID | None = None) -> QuerySet[Seal]:
    qs = Seal.objects.select_related("keeper")

    if keyword:
        k = keyword.strip()
        qs = qs.filter(Q(name__icontains=k) | Q(description__icontains=k) | Q(location__icontains=k))
    if status:
        qs = qs.filter(status=status)
    if seal_type:
        qs = qs.filter(type=seal_type)
    if keeper_id:
        qs = qs.filter(keeper_id=keeper_id)

    return qs.order_by("-updated_at")


def seal_get(*, seal_id: uuid.UUID) -> Seal:
    try:
        return Seal.objects.select_related("keeper").get(id=seal_id)
    except Seal.DoesNotExist:
        raise NotFoundError("Seal not found", code="SEAL_NOT_FOUND")


def seal_keeper_id(*, seal_id: uuid.UUID) -> uuid.UUID | None:
    """Current keeper of a seal, read straight from the table (no caching)."""
    return Seal.objects.filter(id=seal_id).values_list("keeper_id", flat=True).first()


def seal_is_referenced(*, seal: Seal) -> bool:
    return seal.source_application_id is not None or seal.applications.exists()


def seal_registry_summary() -> dict:
    """
    Counts over the whole registry; every status/type is present (zero-filled).
    """
    by_status = {s.value: 0 for s in SealStatus}
    for row in Seal.objects.values("status").annotate(c=Count("id")):
        by_status[row["status"]] = row["c"]

    by_type = {t.value: 0 for t in SealType}
    for row in Seal.objects.values("type").annotate(c=Count("id")):
        by_type[row["type"]] = row["c"]

    return {
        "total": sum(by_status.values()),
        "by_status": by_status,
        "by_type": by_type,
    }
