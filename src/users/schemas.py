from ninja import Schema
from pydantic import field_validator


ALLOWED_ROLES = {"ADMIN", "USER"}
ALLOWED_STATUSES = {"ACTIVE", "INACTIVE", "LOCKED"}


class UserCreatePayload(Schema):
    username: str
    password: str | None = None
    real_name: str = ""
    email: str = ""
    phone: str = ""
    department: str = ""
    position: str = ""
    role: str = "USER"

    @field_validator("username")
    @classmethod
    def _validate_username(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("username is required")
        return v

    @field_validator("email")
    @classmethod
    def _validate_email(cls, v: str) -> str:
        if v and ("@" not in v or "." not in v.split("@")[-1]):
            raise ValueError("Invalid email format")
        return v.strip().lower()

    @field_validator("role")
    @classmethod
    def _validate_role(cls, v: str) -> str:
        role = (v or "").upper().strip()
        if role not in ALLOWED_ROLES:
            raise ValueError(f"role must be one of {sorted(ALLOWED_ROLES)}")
        return role


class FilterParams(Schema):
    status: str | None = None
    search: str | None = None

    @field_validator("status")
    @classmethod
    def _validate_status(cls, v: str | None) -> str | None:
        if v is None:
            return v
        s = v.upper().strip()
        if s not in ALLOWED_STATUSES:
            raise ValueError(f"status must be one of {sorted(ALLOWED_STATUSES)}")
        return s


class UserRolePayload(Schema):
    role: str

    @field_validator("role")
    @classmethod
    def _validate_role(cls, v: str) -> str:
        role = (v or "").upper().strip()
        if role not in ALLOWED_ROLES:
            raise ValueError(f"role must be one of {sorted(ALLOWED_ROLES)}")
        return role


class UserStatusPayload(Schema):
    status: str

    @field_validator("status")
    @classmethod
    def _validate_status(cls, v: str) -> str:
        s = (v or "").upper().strip()
        if s not in ALLOWED_STATUSES:
            raise ValueError(f"status must be one of {sorted(ALLOWED_STATUSES)}")
        return s
