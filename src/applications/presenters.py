from src.applications import policies
from src.applications.models import ApplicationKind
from src.users.presenters import user_ref


def _iso(value):
    return value.isoformat() if value else None


def application_to_dto(app) -> dict:
    dto = {
        "id": app.id,
        "application_no": app.application_no,
        "kind": app.kind,
        "status": app.status,
        "version": app.version,
        "applicant": user_ref(app.applicant),
        "applicant_department": app.applicant_department,
        "purpose": app.purpose,
        "apply_time": _iso(app.apply_time),
        "expected_time": _iso(app.expected_time),
        "approver": user_ref(app.approver),
        "approve_time": _iso(app.approve_time),
        "approve_remark": app.approve_remark,
        "withdrawn_at": _iso(app.withdrawn_at),
        "duration_seconds": app.duration_seconds,
        "updated_at": _iso(app.updated_at),
    }
    if app.kind == ApplicationKind.USAGE:
        dto["seal"] = {
            "id": app.seal.id,
            "name": app.seal.name,
            "status": app.seal.status,
            "keeper": user_ref(app.seal.keeper),
        } if app.seal_id else None
        dto.update({"file_name": app.file_name, "addressee": app.addressee, "copies": app.copies})
    else:
        dto["proposed_seal"] = {
            "name": app.seal_name,
            "type": app.seal_type,
            "shape": app.seal_shape,
            "owner_department": app.owner_department,
            "keeper_department": app.keeper_department,
            "keeper": user_ref(app.proposed_keeper),
            "keeper_phone": app.keeper_phone,
        }
    return dto


def application_permissions(actor, app) -> dict:
    """Actions offertes à l'acteur sur cette demande (évaluées à chaque appel)."""
    pending = app.is_pending
    return {
        "can_decide": pending and policies.can_decide(actor, app),
        "can_withdraw": pending and policies.can_withdraw(actor, app),
        "can_update": pending and policies.can_update(actor, app),
    }
