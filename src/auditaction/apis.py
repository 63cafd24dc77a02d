import uuid

from ninja_extra import api_controller, route
from ninja_jwt.authentication import JWTAuth

from src.api.pagination import Paginator
from src.auditaction import selectors
from src.auditaction.models import AuditLog
from src.core.apis import BaseAPIController
from src.core.exceptions import NotFoundError
from src.core.policies import ensure_admin


def _audit_to_dto(obj: AuditLog, *, full: bool = False) -> dict:
    dto = {
        "id": str(obj.id),
        "timestamp": obj.created_at.isoformat(),
        "category": obj.category,
        "action": obj.action,
        "severity": obj.severity,
        "user": obj.user.username if obj.user else None,
        "target_type": obj.target_type,
        "target_id": obj.target_id,
    }
    if full:
        dto.update({
            "details": obj.details,
            "ip": obj.ip_address,
            "user_agent": obj.user_agent,
            "request_id": obj.request_id,
        })
    return dto


@api_controller("/audit", tags=["Audit"], auth=JWTAuth())
class AuditActionController(BaseAPIController):
    @route.get("/actions")
    def list_actions(
        self,
        category: str | None = None,
        action: str | None = None,
        user_id: str | None = None,
        target_type: str | None = None,
        target_id: str | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
        q: str | None = None,
    ):
        """Journal d'audit filtrable, réservé aux administrateurs"""
        ensure_admin(self.context.request.auth)

        qs = selectors.audit_actions_queryset(
            category=category,
            action=action,
            user_id=user_id,
            target_type=target_type,
            target_id=target_id,
            date_from=date_from,
            date_to=date_to,
            q=q,
        )
        paginator = Paginator(default_page_size=50, max_page_size=200)
        items, meta = paginator.paginate_queryset(qs, self.context.request)
        return self.create_response(
            message="Audit actions fetched",
            data={"items": [_audit_to_dto(o) for o in items], "pagination": meta},
        )

    @route.get("/actions/{audit_id}")
    def get_action(self, audit_id: uuid.UUID):
        ensure_admin(self.context.request.auth)
        obj = AuditLog.objects.select_related("user").filter(id=audit_id).first()
        if obj is None:
            raise NotFoundError("Audit entry not found")
        return self.create_response(message="Audit action", data=_audit_to_dto(obj, full=True))

    @route.get("/stats/by-category")
    def stats_by_category(self, date_from: str | None = None, date_to: str | None = None):
        ensure_admin(self.context.request.auth)
        data = selectors.audit_stats_by_category(date_from=date_from, date_to=date_to)
        return self.create_response(message="Audit stats", data={"items": data})
