from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence, Tuple

from ..core.enums import MembershipRole
from .model import ChatRoom, Message, RoomMember


class ChatRoomRepository(Protocol):
    def create_room(self, *, name: Optional[str], is_direct_message: bool, organization_id: Optional[int]) -> int:
        raise NotImplementedError

    def get_by_id(self, room_id: int) -> Optional[ChatRoom]:
        raise NotImplementedError

    def update_name(self, *, room_id: int, name: str) -> bool:
        raise NotImplementedError

    def delete_by_id(self, room_id: int) -> bool:
        raise NotImplementedError

    def list_for_user(self, user_id: int) -> Sequence[ChatRoom]:
        raise NotImplementedError

    def find_direct_room(self, user_a: int, user_b: int) -> Optional[ChatRoom]:
        raise NotImplementedError

    def add_member(self, *, room_id: int, user_id: int, role: MembershipRole) -> None:
        raise NotImplementedError

    def get_member_role(self, *, room_id: int, user_id: int) -> Optional[MembershipRole]:
        raise NotImplementedError

    def remove_member(self, *, room_id: int, user_id: int) -> bool:
        raise NotImplementedError

    def list_members(self, room_id: int) -> Sequence[RoomMember]:
        raise NotImplementedError


class MessageRepository(Protocol):
    def create(self, *, chat_room_id: int, user_id: int, content: str) -> int:
        raise NotImplementedError

    def get_by_id(self, message_id: int) -> Optional[Message]:
        raise NotImplementedError

    def update_content(self, *, message_id: int, content: str) -> bool:
        raise NotImplementedError

    def delete_by_id(self, message_id: int) -> bool:
        raise NotImplementedError

    def list_for_room(self, room_id: int, *, offset: int, limit: int) -> Tuple[Sequence[Message], int]:
        """Newest first, plus total count."""
        raise NotImplementedError

    def mark_read(self, *, room_id: int, reader_id: int, read_at: datetime, limit: Optional[int] = None) -> int:
        """Mark unread messages written by others as read; returns how many changed."""
        raise NotImplementedError
