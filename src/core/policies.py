from src.core.exceptions import ForbiddenError
from src.users.models import UserRole


def ensure_admin(user) -> None:
    if getattr(user, "role", None) != UserRole.ADMIN:
        raise ForbiddenError("Only administrators can access this")

