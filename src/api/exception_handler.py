import traceback

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, InterfaceError, OperationalError
from ninja.errors import ValidationError as NinjaValidationError
from ninja_extra import NinjaExtraAPI

# psycopg 3: use error classes under psycopg.errors (no "errorcodes" module)
from psycopg import errors as pg_errors

from src.core.apis import request_id_of
from src.core.exceptions import APIError, StoreUnavailableError

logger = structlog.get_logger(__name__)

# constraint name -> (code, message, field)
CONSTRAINT_ERRORS = {
    "application_no_unique": ("APPLICATION_NO_TAKEN", "Application number already allocated", "application_no"),
    "application_number_counter_unique": ("CONFLICT", "Application number allocation conflict", None),
    "seals_source_application_id_key": ("SEAL_ALREADY_CREATED", "A seal was already created for this application", None),
    "application_decision_fields_consistent": (
        "INVALID_STATE", "Decision fields do not match the application status", None,
    ),
    "usage_application_requires_seal": ("VALIDATION_ERROR", "A usage application must reference a seal", "seal_id"),
    "application_copies_positive": ("VALIDATION_ERROR", "copies must be positive", "copies"),
}


def _constraint_name(exc: IntegrityError) -> str:
    cause = getattr(exc, "__cause__", None)
    # psycopg 3 diagnostics (None on sqlite)
    diag = getattr(cause, "diag", None) if cause else None
    name = getattr(diag, "constraint_name", "") if diag else ""
    if name:
        return name
    text = str(exc)
    for candidate in CONSTRAINT_ERRORS:
        if candidate in text:
            return candidate
    return ""


def attach_exception_handlers(api: NinjaExtraAPI) -> None:
    def _envelope(request, *, message: str, status: int, code: str, data=None, errors=None, extra=None,):
        return api.create_response(
            request,
            {
                "success": 200 <= status < 400,
                "message": message,
                "data": data or {},
                "extra": extra or {},
                "errors": errors,
                "code": code,
                "request_id": request_id_of(request),
            },
            status=status,
        )

    @api.exception_handler(APIError)
    def on_api_error(request, exc: APIError):
        logger.info("api.error", code=exc.code, status=exc.status, path=request.path)
        return _envelope(
            request,
            message=exc.message,
            status=exc.status,
            code=exc.code,
            errors=exc.errors,
            extra=exc.extra,
        )

    @api.exception_handler(IntegrityError)
    def on_integrity_error(request, exc: IntegrityError):
        status, code, msg, field = 409, "CONFLICT", "Conflict", None

        constraint = _constraint_name(exc)
        if constraint in CONSTRAINT_ERRORS:
            code, msg, field = CONSTRAINT_ERRORS[constraint]
            if code == "VALIDATION_ERROR":
                status = 422
        elif isinstance(getattr(exc, "__cause__", None), pg_errors.UniqueViolation):
            code, msg = "ALREADY_EXISTS", "Resource already exists"

        logger.warning("api.integrity_error", constraint=constraint, code=code)
        errors = {field: [msg]} if field else None
        return _envelope(request, message=msg, status=status, code=code, errors=errors)

    @api.exception_handler(OperationalError)
    def on_store_unavailable(request, exc: OperationalError):
        logger.warning("store.unavailable", path=request.path, error=str(exc))
        err = StoreUnavailableError()
        return _envelope(request, message=err.message, status=err.status, code=err.code, extra=err.extra)

    api.add_exception_handler(InterfaceError, on_store_unavailable)

    @api.exception_handler(DjangoValidationError)
    def on_django_validation_error(request, exc: DjangoValidationError):
        errors = exc.message_dict if hasattr(exc, "message_dict") else exc.messages
        return _envelope(
            request,
            message="Validation error",
            status=422,
            code="VALIDATION_ERROR",
            errors=errors,
        )

    @api.exception_handler(NinjaValidationError)
    def on_ninja_validation_error(request, exc: NinjaValidationError):
        return _envelope(
            request,
            message="Validation error",
            status=422,
            code="VALIDATION_ERROR",
            errors=exc.errors,
        )

    @api.exception_handler(Exception)
    def on_unexpected_error(request, exc: Exception):
        logger.exception("api.unexpected_error", path=request.path)
        err = None
        extra = {}
        if settings.DEBUG:
            err = str(exc)
            extra["trace"] = traceback.format_exc(limit=20)
        return _envelope(
            request,
            message="Unexpected error",
            status=500,
            code="INTERNAL_ERROR",
            errors=err,
            extra=extra or None,
        )
