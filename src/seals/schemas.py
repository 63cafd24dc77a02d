import uuid

from ninja import Schema
from pydantic import field_validator

from src.seals.models import SealShape, SealStatus, SealType


def _upper_choice(v: str | None, allowed: list[str], field: str) -> str | None:
    if v is None:
        return v
    s = v.upper().strip()
    if s not in allowed:
        raise ValueError(f"{field} must be one of {allowed}")
    return s


class SealCreatePayload(Schema):
    name: str
    type: str
    shape: str = SealShape.ROUND
    keeper_id: uuid.UUID
    owner_department: str = ""
    keeper_department: str = ""
    keeper_phone: str = ""
    description: str = ""
    location: str = ""

    @field_validator("name")
    @classmethod
    def _validate_name(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("name is required")
        return v

    @field_validator("type")
    @classmethod
    def _validate_type(cls, v: str) -> str:
        return _upper_choice(v, SealType.values, "type")

    @field_validator("shape")
    @classmethod
    def _validate_shape(cls, v: str) -> str:
        return _upper_choice(v, SealShape.values, "shape")


class SealUpdatePayload(Schema):
    name: str | None = None
    type: str | None = None
    shape: str | None = None
    keeper_id: uuid.UUID | None = None
    owner_department: str | None = None
    keeper_department: str | None = None
    keeper_phone: str | None = None
    description: str | None = None
    location: str | None = None

    @field_validator("type")
    @classmethod
    def _validate_type(cls, v: str | None) -> str | None:
        return _upper_choice(v, SealType.values, "type")

    @field_validator("shape")
    @classmethod
    def _validate_shape(cls, v: str | None) -> str | None:
        return _upper_choice(v, SealShape.values, "shape")


class SealStatusPayload(Schema):
    status: str
    reason: str = ""

    @field_validator("status")
    @classmethod
    def _validate_status(cls, v: str) -> str:
        return _upper_choice(v, SealStatus.values, "status")


class SealFilterParams(Schema):
    keyword: str | None = None
    status: str | None = None
    type: str | None = None
    keeper_id: uuid.UUID | None = None

    @field_validator("status")
    @classmethod
    def _validate_status(cls, v: str | None) -> str | None:
        return _upper_choice(v, SealStatus.values, "status")

    @field_validator("type")
    @classmethod
    def _validate_type(cls, v: str | None) -> str | None:
        return _upper_choice(v, SealType.values, "type")
