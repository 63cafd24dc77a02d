"""
Qui peut décider, retirer ou modifier une demande.

Keeper lookups always hit the database: the seal keeper can be reassigned
between submission and decision.
"""
from src.applications.models import ApplicationKind
from src.core.exceptions import ForbiddenError
from src.seals.selectors import seal_keeper_id
from src.users.models import UserRole


def _is_admin(actor) -> bool:
    return getattr(actor, "role", None) == UserRole.ADMIN


def _same_user(actor, user_id) -> bool:
    return user_id is not None and getattr(actor, "pk", None) == user_id


def can_decide(actor, application) -> bool:
    if actor is None:
        return False
    if _is_admin(actor):
        return True
    if application.kind != ApplicationKind.USAGE:
        return False
    return _same_user(actor, seal_keeper_id(seal_id=application.seal_id))


def can_withdraw(actor, application) -> bool:
    return actor is not None and _same_user(actor, application.applicant_id)


def can_update(actor, application) -> bool:
    return can_withdraw(actor, application)


def ensure_can_decide(actor, application) -> None:
    if not can_decide(actor, application):
        if application.kind == ApplicationKind.CREATION:
            raise ForbiddenError("Only administrators can decide seal creation applications")
        raise ForbiddenError("Only the seal keeper or an administrator can decide this application")


def ensure_can_withdraw(actor, application) -> None:
    if not can_withdraw(actor, application):
        raise ForbiddenError("Only the applicant can withdraw this application")


def ensure_can_update(actor, application) -> None:
    if not can_update(actor, application):
        raise ForbiddenError("Only the applicant can edit this application")


def can_view(actor, application) -> bool:
    return can_withdraw(actor, application) or can_decide(actor, application)


def ensure_can_view(actor, application) -> None:
    if not can_view(actor, application):
        raise ForbiddenError("You cannot access this application")
