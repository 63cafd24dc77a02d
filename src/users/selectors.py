from django.db.models import Q, QuerySet

from src.core.policies import ensure_admin
from src.users.models import User, UserRole


def user_list(*, user: User, status: str | None = None, search: str | None = None) -> QuerySet[User]:
    """
    List users; administrators only.
    """
    ensure_admin(user)

    qs = User.objects.all()

    if status:
        qs = qs.filter(status=status)

    if search:
        s = search.strip()
        qs = qs.filter(
            Q(username__icontains=s)
            | Q(real_name__icontains=s)
            | Q(department__icontains=s)
        )

    return qs.order_by("username")


def admin_emails() -> list[str]:
    qs = (
        User.objects.filter(role=UserRole.ADMIN, is_active=True)
        .exclude(email="")
        .values_list("email", flat=True)
        .distinct()
    )
    return list(qs)
