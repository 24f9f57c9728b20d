from __future__ import annotations

from typing import Optional

from ..common.datetime_utils import iso
from .model import User


def user_brief(user: Optional[User]) -> Optional[dict]:
    if user is None:
        return None
    return {"id": user.user_id, "name": user.name}


def user_json(user: User) -> dict:
    return {
        "id": user.user_id,
        "name": user.name,
        "email": user.email,
        "role": user.role.value,
        "department": user.department,
        "position": user.position,
        "bio": user.bio,
        "is_active": user.is_active,
        "last_login_at": iso(user.last_login_at),
        "created_at": iso(user.created_at),
    }
