from django.db import models
from django.db.models import Q

from src.common.models import BaseModel
from src.seals.models import SealShape, SealType


class ApplicationKind(models.TextChoices):
    USAGE = "USAGE", "Seal usage"
    CREATION = "CREATION", "Seal creation"


class ApplicationStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    APPROVED = "APPROVED", "Approved"
    REJECTED = "REJECTED", "Rejected"
    WITHDRAWN = "WITHDRAWN", "Withdrawn"


DECIDED_STATUSES = (ApplicationStatus.APPROVED, ApplicationStatus.REJECTED)


class Application(BaseModel):
    """
    Demande d'utilisation ou de création de sceau.
    One lifecycle for both kinds: PENDING -> APPROVED | REJECTED | WITHDRAWN.
    """

    application_no = models.CharField(max_length=32, editable=False)
    kind = models.CharField(max_length=16, choices=ApplicationKind.choices, db_index=True)
    status = models.CharField(
        max_length=16,
        choices=ApplicationStatus.choices,
        default=ApplicationStatus.PENDING,
        db_index=True,
    )
    # Compare-and-swap counter, bumped on every write
    version = models.PositiveIntegerField(default=1)

    applicant = models.ForeignKey(
        "users.User",
        on_delete=models.PROTECT,
        related_name="applications",
    )
    applicant_department = models.CharField(max_length=100)
    purpose = models.TextField()
    apply_time = models.DateTimeField(editable=False, db_index=True)
    expected_time = models.DateTimeField(null=True, blank=True)

    # Décision
    approver = models.ForeignKey(
        "users.User",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="decided_applications",
    )
    approve_time = models.DateTimeField(null=True, blank=True)
    approve_remark = models.TextField(null=True, blank=True)
    withdrawn_at = models.DateTimeField(null=True, blank=True)

    # USAGE
    seal = models.ForeignKey(
        "seals.Seal",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="applications",
    )
    file_name = models.CharField(max_length=200, blank=True)
    addressee = models.CharField(max_length=200, blank=True)
    copies = models.PositiveIntegerField(default=1)

    # CREATION (proposed seal descriptor)
    seal_name = models.CharField(max_length=100, blank=True)
    seal_type = models.CharField(max_length=20, choices=SealType.choices, blank=True)
    seal_shape = models.CharField(max_length=20, choices=SealShape.choices, blank=True)
    owner_department = models.CharField(max_length=100, blank=True)
    keeper_department = models.CharField(max_length=100, blank=True)
    proposed_keeper = models.ForeignKey(
        "users.User",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="proposed_seal_applications",
    )
    keeper_phone = models.CharField(max_length=20, blank=True)

    class Meta:
        db_table = "seal_applications"
        ordering = ["-apply_time"]
        constraints = [
            models.UniqueConstraint(fields=["application_no"], name="application_no_unique"),
            models.CheckConstraint(
                check=(
                    Q(status__in=DECIDED_STATUSES, approver__isnull=False, approve_time__isnull=False)
                    | Q(
                        status__in=(ApplicationStatus.PENDING, ApplicationStatus.WITHDRAWN),
                        approver__isnull=True,
                        approve_time__isnull=True,
                    )
                ),
                name="application_decision_fields_consistent",
            ),
            models.CheckConstraint(
                check=~Q(kind=ApplicationKind.USAGE) | Q(seal__isnull=False),
                name="usage_application_requires_seal",
            ),
            models.CheckConstraint(check=Q(copies__gte=1), name="application_copies_positive"),
        ]
        indexes = [
            models.Index(fields=["kind", "status"], name="application_kind_status_idx"),
            models.Index(fields=["applicant", "-apply_time"], name="application_applicant_idx"),
            models.Index(fields=["seal", "status"], name="application_seal_status_idx"),
        ]

    def __str__(self):
        return f"{self.application_no} [{self.kind}] {self.status}"

    @property
    def is_pending(self) -> bool:
        return self.status == ApplicationStatus.PENDING

    @property
    def duration_seconds(self) -> float | None:
        if self.status not in DECIDED_STATUSES or not (self.apply_time and self.approve_time):
            return None
        return (self.approve_time - self.apply_time).total_seconds()


class ApplicationNumberCounter(BaseModel):
    """Dernier numéro émis par (préfixe, jour). Never decremented."""

    prefix = models.CharField(max_length=4)
    day = models.DateField()
    last_value = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "seal_application_counters"
        constraints = [
            models.UniqueConstraint(fields=["prefix", "day"], name="application_number_counter_unique"),
        ]

    def __str__(self):
        return f"{self.prefix}{self.day:%Y%m%d}:{self.last_value}"
