from contextlib import contextmanager

import structlog
from django.db import InterfaceError, OperationalError

from src.core.exceptions import StoreUnavailableError

logger = structlog.get_logger(__name__)


@contextmanager
def store_guard(operation: str):
    """
    Translate driver-level failures (timeouts, lost connections, locked
    database) into StoreUnavailableError. Usable as a decorator.
    """
    try:
        yield
    except (OperationalError, InterfaceError) as exc:
        logger.warning("store.unavailable", operation=operation, error=str(exc))
        raise StoreUnavailableError(extra={"operation": operation}) from exc
