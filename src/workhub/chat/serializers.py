from __future__ import annotations

from ..common.datetime_utils import iso
from .model import Message, RoomMember, RoomView


def message_json(m: Message) -> dict:
    return {
        "id": m.message_id,
        "chat_room_id": m.chat_room_id,
        "user_id": m.user_id,
        "content": m.content,
        "read": m.read,
        "read_at": iso(m.read_at),
        "created_at": iso(m.created_at),
        "updated_at": iso(m.updated_at),
        "user": {"id": m.user_id, "name": m.author_name},
    }


def member_json(m: RoomMember) -> dict:
    return {"id": m.user_id, "name": m.name, "role": m.role.value}


def room_json(view: RoomView) -> dict:
    room = view.room
    return {
        "id": room.room_id,
        "name": room.name,
        "is_direct_message": room.is_direct_message,
        "organization_id": room.organization_id,
        "created_at": iso(room.created_at),
        "users": [member_json(m) for m in view.members],
    }
