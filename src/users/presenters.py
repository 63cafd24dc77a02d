def user_to_dto(user) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "real_name": user.real_name,
        "email": user.email,
        "phone": user.phone,
        "department": user.department,
        "position": user.position,
        "role": user.role,
        "status": user.status,
    }


def user_ref(user) -> dict | None:
    """Compact identity reference embedded in other payloads"""
    if user is None:
        return None
    return {"id": user.id, "username": user.username, "real_name": user.real_name}
