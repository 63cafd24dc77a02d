import uuid
from datetime import datetime

from ninja import Schema
from pydantic import field_validator

from src.applications.models import ApplicationKind, ApplicationStatus
from src.seals.models import SealShape, SealType

LIST_SCOPES = ("my", "pending", "all")
STAT_SCOPES = ("my", "keeper", "all")


def _upper_choice(v: str | None, allowed, field: str) -> str | None:
    if v is None or v == "":
        return v or None
    s = v.upper().strip()
    if s not in allowed:
        raise ValueError(f"{field} must be one of {list(allowed)}")
    return s


class ApplicationSubmitPayload(Schema):
    kind: str
    purpose: str
    applicant_department: str | None = None
    expected_time: datetime | None = None

    # USAGE
    seal_id: uuid.UUID | None = None
    file_name: str = ""
    addressee: str = ""
    copies: int = 1

    # CREATION
    seal_name: str = ""
    seal_type: str = ""
    seal_shape: str = ""
    owner_department: str = ""
    keeper_department: str = ""
    proposed_keeper_id: uuid.UUID | None = None
    keeper_phone: str = ""

    @field_validator("kind")
    @classmethod
    def _validate_kind(cls, v: str) -> str:
        return _upper_choice(v, ApplicationKind.values, "kind")

    @field_validator("seal_type")
    @classmethod
    def _validate_seal_type(cls, v: str) -> str:
        return _upper_choice(v, SealType.values, "seal_type") or ""

    @field_validator("seal_shape")
    @classmethod
    def _validate_seal_shape(cls, v: str) -> str:
        return _upper_choice(v, SealShape.values, "seal_shape") or ""


class ApplicationUpdatePayload(Schema):
    """Only the fields sent are applied (PATCH)."""
    applicant_department: str | None = None
    purpose: str | None = None
    expected_time: datetime | None = None
    seal_id: uuid.UUID | None = None
    file_name: str | None = None
    addressee: str | None = None
    copies: int | None = None
    seal_name: str | None = None
    seal_type: str | None = None
    seal_shape: str | None = None
    owner_department: str | None = None
    keeper_department: str | None = None
    proposed_keeper_id: uuid.UUID | None = None
    keeper_phone: str | None = None

    @field_validator("seal_type")
    @classmethod
    def _validate_seal_type(cls, v: str | None) -> str | None:
        return _upper_choice(v, SealType.values, "seal_type")

    @field_validator("seal_shape")
    @classmethod
    def _validate_seal_shape(cls, v: str | None) -> str | None:
        return _upper_choice(v, SealShape.values, "seal_shape")


class DecisionPayload(Schema):
    decision: str
    remark: str | None = None

    @field_validator("decision")
    @classmethod
    def _validate_decision(cls, v: str) -> str:
        return _upper_choice(v, (ApplicationStatus.APPROVED, ApplicationStatus.REJECTED), "decision")


class BatchDecisionPayload(DecisionPayload):
    application_ids: list[uuid.UUID]


class ApplicationFilterParams(Schema):
    scope: str = "my"
    status: str | None = None
    kind: str | None = None
    keyword: str | None = None

    @field_validator("scope")
    @classmethod
    def _validate_scope(cls, v: str) -> str:
        s = (v or "my").lower().strip()
        if s not in LIST_SCOPES:
            raise ValueError(f"scope must be one of {list(LIST_SCOPES)}")
        return s

    @field_validator("status")
    @classmethod
    def _validate_status(cls, v: str | None) -> str | None:
        return _upper_choice(v, ApplicationStatus.values, "status")

    @field_validator("kind")
    @classmethod
    def _validate_kind(cls, v: str | None) -> str | None:
        return _upper_choice(v, ApplicationKind.values, "kind")


class StatisticsParams(Schema):
    scope: str = "my"
    kind: str | None = None

    @field_validator("scope")
    @classmethod
    def _validate_scope(cls, v: str) -> str:
        s = (v or "my").lower().strip()
        if s not in STAT_SCOPES:
            raise ValueError(f"scope must be one of {list(STAT_SCOPES)}")
        return s

    @field_validator("kind")
    @classmethod
    def _validate_kind(cls, v: str | None) -> str | None:
        return _upper_choice(v, ApplicationKind.values, "kind")
