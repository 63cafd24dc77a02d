from src.users.presenters import user_ref


def seal_to_dto(seal) -> dict:
    return {
        "id": seal.id,
        "name": seal.name,
        "type": seal.type,
        "shape": seal.shape,
        "status": seal.status,
        "is_usable": seal.is_usable,
        "owner_department": seal.owner_department,
        "keeper_department": seal.keeper_department,
        "keeper": user_ref(seal.keeper),
        "keeper_phone": seal.keeper_phone,
        "description": seal.description,
        "location": seal.location,
        "source_application_id": seal.source_application_id,
        "created_at": seal.created_at.isoformat() if seal.created_at else None,
        "updated_at": seal.updated_at.isoformat() if seal.updated_at else None,
    }
