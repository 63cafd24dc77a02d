import structlog
from django.db import transaction

from src.auditaction.models import AuditAction, AuditCategory
from src.auditaction.services import audit_action_create
from src.core.exceptions import NotFoundError, ValidationError
from src.core.policies import ensure_admin
from src.users.models import User, UserRole, UserStatus

logger = structlog.get_logger(__name__)


@transaction.atomic
def user_create_by_admin(
    *,
    created_by: User,
    username: str,
    password: str | None = None,
    real_name: str = "",
    email: str = "",
    phone: str = "",
    department: str = "",
    position: str = "",
    role: str = UserRole.USER,
) -> User:
    ensure_admin(created_by)

    if User.objects.filter(username=username).exists():
        raise ValidationError(
            "Username already in use",
            code="USERNAME_TAKEN",
            errors={"username": ["already taken"]},
        )

    user = User.objects.create_user(
        username=username,
        password=password,
        real_name=real_name,
        email=email,
        phone=phone,
        department=department,
        position=position,
        role=role,
        status=UserStatus.ACTIVE,
    )

    audit_action_create(
        user=created_by,
        action=AuditAction.USER_CREATED,
        category=AuditCategory.USER,
        details={"username": user.username, "role": user.role},
        target_type="user",
        target_id=str(user.id),
    )
    return user


def _lock_other_user(*, user_id, changed_by: User) -> User:
    ensure_admin(changed_by)
    user = User.objects.select_for_update().filter(id=user_id).first()
    if user is None:
        raise NotFoundError("User not found", code="USER_NOT_FOUND")
    # an administrator cannot demote or lock themselves out
    if user.pk == changed_by.pk:
        raise ValidationError("You cannot change your own account", code="CANNOT_CHANGE_SELF")
    return user


@transaction.atomic
def user_update_role(*, user_id, changed_by: User, role: str) -> User:
    if role not in UserRole.values:
        raise ValidationError("Invalid role", errors={"role": [f"must be one of {UserRole.values}"]})

    user = _lock_other_user(user_id=user_id, changed_by=changed_by)
    previous = user.role
    if previous == role:
        return user

    user.role = role
    user.save(update_fields=["role", "updated_at"])

    audit_action_create(
        user=changed_by,
        action=AuditAction.USER_ROLE_CHANGED,
        category=AuditCategory.USER,
        details={"username": user.username, "from": previous, "to": role},
        target_type="user",
        target_id=str(user.id),
    )
    logger.info("user.role_changed", user_id=str(user.id), previous=previous, role=role)
    return user


@transaction.atomic
def user_update_status(*, user_id, changed_by: User, status: str) -> User:
    """
    ACTIVE / INACTIVE / LOCKED. Anything but ACTIVE clears is_active, so
    JWTAuth refuses the account's tokens from the next request on.
    """
    if status not in UserStatus.values:
        raise ValidationError("Invalid status", errors={"status": [f"must be one of {UserStatus.values}"]})

    user = _lock_other_user(user_id=user_id, changed_by=changed_by)
    previous = user.status
    if previous == status:
        return user

    user.status = status
    user.save(update_fields=["status", "is_active", "updated_at"])

    audit_action_create(
        user=changed_by,
        action=AuditAction.USER_STATUS_CHANGED,
        category=AuditCategory.USER,
        details={"username": user.username, "from": previous, "to": status},
        target_type="user",
        target_id=str(user.id),
    )
    logger.info("user.status_changed", user_id=str(user.id), previous=previous, status=status)
    return user
