from django.db import models

from src.common.models import BaseModel


class SealType(models.TextChoices):
    OFFICIAL = "OFFICIAL", "Official seal"
    FINANCE = "FINANCE", "Finance seal"
    CONTRACT = "CONTRACT", "Contract seal"
    LEGAL = "LEGAL", "Legal seal"
    HR = "HR", "HR seal"
    PERSONAL = "PERSONAL", "Personal seal"


class SealShape(models.TextChoices):
    ROUND = "ROUND", "Round"
    SQUARE = "SQUARE", "Square"
    OVAL = "OVAL", "Oval"


class SealStatus(models.TextChoices):
    IN_USE = "IN_USE", "In use"
    DESTROYED = "DESTROYED", "Destroyed"
    LOST = "LOST", "Lost"
    SUSPENDED = "SUSPENDED", "Suspended"


# Seals in these states cannot be targeted by new usage applications
UNUSABLE_SEAL_STATUSES = (SealStatus.DESTROYED, SealStatus.LOST)


class Seal(BaseModel):
    """
    Physical seal (stamp) kept by a named custodian.
    Soft lifecycle only once an application references it.
    """

    name = models.CharField(max_length=100, db_index=True)
    type = models.CharField(max_length=20, choices=SealType.choices)
    shape = models.CharField(max_length=20, choices=SealShape.choices, default=SealShape.ROUND)
    status = models.CharField(
        max_length=20,
        choices=SealStatus.choices,
        default=SealStatus.IN_USE,
        db_index=True,
    )

    owner_department = models.CharField(max_length=100, blank=True)
    keeper_department = models.CharField(max_length=100, blank=True)
    keeper = models.ForeignKey(
        "users.User",
        on_delete=models.PROTECT,
        related_name="kept_seals",
        help_text="Custodian whose approval is required to use the seal",
    )
    keeper_phone = models.CharField(max_length=20, blank=True)

    description = models.TextField(blank=True)
    location = models.CharField(max_length=200, blank=True)

    # Set when the seal was produced by an approved creation application
    source_application = models.OneToOneField(
        "applications.Application",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="created_seal",
    )

    class Meta:
        db_table = "seals"
        verbose_name = "Seal"
        verbose_name_plural = "Seals"
        indexes = [
            models.Index(fields=["type", "status"], name="seal_type_status_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.status})"

    @property
    def is_usable(self) -> bool:
        return self.status not in UNUSABLE_SEAL_STATUSES
