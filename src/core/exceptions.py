from __future__ import annotations
from typing import Any


class APIError(Exception):
    retryable = False

    def __init__(self, *, message: str, code: str, status: int, errors: Any = None, extra: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status
        self.errors = errors
        self.extra = extra or {}
        if self.retryable:
            self.extra.setdefault("retryable", True)


class ValidationError(APIError):
    """Entrée invalide ou incomplète : le client corrige puis resoumet"""

    def __init__(self, message: str = "Validation error", *, code: str = "VALIDATION_ERROR", errors: Any = None,
                 extra: dict[str, Any] | None = None):
        super().__init__(message=message, code=code, status=422, errors=errors, extra=extra)


class NotFoundError(APIError):
    """Ressource non trouvée"""

    def __init__(self, message: str = "Not found", *, code: str = "NOT_FOUND", errors: Any = None,
                 extra: dict[str, Any] | None = None):
        super().__init__(message=message, code=code, status=404, errors=errors, extra=extra)


class InvalidStateError(APIError):
    """Transition refusée depuis l'état courant (re-fetch required)"""

    def __init__(self, message: str = "Invalid state", *, code: str = "INVALID_STATE", errors: Any = None,
                 extra: dict[str, Any] | None = None):
        super().__init__(message=message, code=code, status=409, errors=errors, extra=extra)


class ForbiddenError(APIError):
    """Erreur de permission"""

    def __init__(self, message: str = "Permission denied", *, code: str = "FORBIDDEN", errors: Any = None,
                 extra: dict[str, Any] | None = None):
        super().__init__(message=message, code=code, status=403, errors=errors, extra=extra)


class ConflictError(APIError):
    """Lost a concurrent race on the same row; safe to retry after re-reading"""
    retryable = True

    def __init__(self, message: str = "Conflict", *, code: str = "CONFLICT", errors: Any = None,
                 extra: dict[str, Any] | None = None):
        super().__init__(message=message, code=code, status=409, errors=errors, extra=extra)


class StoreUnavailableError(APIError):
    retryable = True

    def __init__(self, message: str = "Storage temporarily unavailable", *, code: str = "STORE_UNAVAILABLE",
                 errors: Any = None, extra: dict[str, Any] | None = None):
        super().__init__(message=message, code=code, status=503, errors=errors, extra=extra)
