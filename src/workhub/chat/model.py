from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import MembershipRole


@dataclass(frozen=True)
class ChatRoom:
    room_id: int
    name: Optional[str]
    is_direct_message: bool
    organization_id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class RoomMember:
    user_id: int
    name: str
    role: MembershipRole


@dataclass(frozen=True)
class RoomView:
    room: ChatRoom
    members: Sequence[RoomMember]


@dataclass(frozen=True)
class Message:
    message_id: int
    chat_room_id: int
    user_id: int
    content: str
    read: bool = False
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author_name: Optional[str] = None
