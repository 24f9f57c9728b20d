from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from ..common.datetime_utils import now_local
from ..common.jobs import JobRunner
from ..common.pagination import Page, PageRequest
from ..common.validators import parse_int_field, require_max_length, require_non_empty
from ..core.constants import DEFAULT_MESSAGES_PER_PAGE, DIRECT_MESSAGE_ROOM_NAME, MESSAGE_MAX_LENGTH
from ..core.enums import ChatEvent, MembershipRole
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..organizations.service import OrganizationService
from ..users.model import User
from ..users.repository import UserRepository
from .broadcaster import Broadcaster, room_topic
from .jobs import MarkMessagesAsReadJob
from .model import ChatRoom, Message, RoomView
from .repository import ChatRoomRepository, MessageRepository
from .serializers import message_json

logger = logging.getLogger(__name__)


class ChatRoomService:
    def __init__(self, rooms: ChatRoomRepository, users: UserRepository, organizations: OrganizationService):
        self._rooms = rooms
        self._users = users
        self._orgs = organizations

    def get_or_404(self, room_id: int) -> ChatRoom:
        room = self._rooms.get_by_id(int(room_id))
        if not room:
            raise NotFoundError("Chat room not found")
        return room

    def require_member(self, *, room_id: int, user_id: int) -> MembershipRole:
        self.get_or_404(room_id)
        role = self._rooms.get_member_role(room_id=int(room_id), user_id=int(user_id))
        if role is None:
            raise AuthorizationError("You are not a member of this chat room")
        return role

    def _require_admin(self, room_id: int, user_id: int) -> ChatRoom:
        if self.require_member(room_id=room_id, user_id=user_id) != MembershipRole.ADMIN:
            raise AuthorizationError("Only room admins can do that")
        return self.get_or_404(room_id)

    def _view(self, room: ChatRoom) -> RoomView:
        return RoomView(room=room, members=self._rooms.list_members(room.room_id))

    def _existing_users(self, user_ids: Iterable) -> List[User]:
        ids = {parse_int_field(u, "user_ids") for u in user_ids}
        ids.discard(None)
        users = list(self._users.list_by_ids(sorted(ids)))
        missing = ids - {u.user_id for u in users}
        if missing:
            raise NotFoundError(f"User(s) not found: {', '.join(str(m) for m in sorted(missing))}")
        return users

    def list_for_user(self, user_id: int) -> Tuple[List[RoomView], List[RoomView]]:
        """(direct_messages, channels)"""
        direct: List[RoomView] = []
        channels: List[RoomView] = []
        for room in self._rooms.list_for_user(int(user_id)):
            (direct if room.is_direct_message else channels).append(self._view(room))
        return direct, channels

    def get(self, *, actor_id: int, room_id: int) -> RoomView:
        self.require_member(room_id=room_id, user_id=actor_id)
        return self._view(self.get_or_404(room_id))

    def create_group(
        self,
        *,
        actor_id: int,
        name: Optional[str],
        user_ids: Sequence = (),
        organization_id=None,
    ) -> RoomView:
        name = require_non_empty(name, "name")
        require_max_length(name, "name", 100)
        org_id = parse_int_field(organization_id, "organization_id")
        if org_id is not None:
            self._orgs.require_member(organization_id=org_id, user_id=actor_id)
        others = [u for u in self._existing_users(user_ids or ()) if u.user_id != int(actor_id)]

        room_id = self._rooms.create_room(name=name, is_direct_message=False, organization_id=org_id)
        self._rooms.add_member(room_id=room_id, user_id=int(actor_id), role=MembershipRole.ADMIN)
        for u in others:
            self._rooms.add_member(room_id=room_id, user_id=u.user_id, role=MembershipRole.MEMBER)
        logger.info("Chat room %s created by user %s", room_id, actor_id)
        return self._view(self.get_or_404(room_id))

    def direct_message(self, *, actor_id: int, other_user_id) -> RoomView:
        """Get or create the single two-person room between actor and other user."""
        other_id = parse_int_field(other_user_id, "user_id")
        if other_id is None:
            raise ValidationError("user_id is required", errors={"user_id": ["can't be blank"]})
        if other_id == int(actor_id):
            raise ValidationError("You cannot start a direct message with yourself")
        self._existing_users([other_id])

        a, b = sorted((int(actor_id), other_id))
        existing = self._rooms.find_direct_room(a, b)
        if existing:
            return self._view(existing)

        room_id = self._rooms.create_room(name=DIRECT_MESSAGE_ROOM_NAME, is_direct_message=True, organization_id=None)
        for uid in (a, b):
            self._rooms.add_member(room_id=room_id, user_id=uid, role=MembershipRole.MEMBER)
        return self._view(self.get_or_404(room_id))

    def update(self, *, actor_id: int, room_id: int, name: Optional[str]) -> RoomView:
        room = self._require_admin(room_id, actor_id)
        if room.is_direct_message:
            raise ValidationError("Direct message rooms cannot be renamed")
        name = require_non_empty(name, "name")
        require_max_length(name, "name", 100)
        self._rooms.update_name(room_id=room.room_id, name=name)
        return self._view(self.get_or_404(room.room_id))

    def delete(self, *, actor_id: int, room_id: int) -> None:
        room = self._require_admin(room_id, actor_id)
        self._rooms.delete_by_id(room.room_id)
        logger.info("Chat room %s deleted by user %s", room.room_id, actor_id)

    def add_members(self, *, actor_id: int, room_id: int, user_ids: Sequence) -> RoomView:
        room = self._require_admin(room_id, actor_id)
        if room.is_direct_message:
            raise ValidationError("Cannot add members to a direct message")
        for u in self._existing_users(user_ids or ()):
            if self._rooms.get_member_role(room_id=room.room_id, user_id=u.user_id) is None:
                self._rooms.add_member(room_id=room.room_id, user_id=u.user_id, role=MembershipRole.MEMBER)
        return self._view(room)

    def remove_member(self, *, actor_id: int, room_id: int, user_id: int) -> RoomView:
        room = self._require_admin(room_id, actor_id)
        if room.is_direct_message:
            raise ValidationError("Cannot remove members from a direct message")
        if int(user_id) == int(actor_id):
            raise ValidationError("You cannot remove yourself")
        if not self._rooms.remove_member(room_id=room.room_id, user_id=int(user_id)):
            raise NotFoundError("User is not a member of this chat room")
        return self._view(room)


class MessageService:
    """Message persistence plus best-effort fan-out on the room topic."""

    def __init__(
        self,
        rooms: ChatRoomService,
        room_repo: ChatRoomRepository,
        messages: MessageRepository,
        users: UserRepository,
        *,
        broadcaster: Broadcaster,
        jobs: JobRunner,
    ):
        self._rooms = rooms
        self._room_repo = room_repo
        self._messages = messages
        self._users = users
        self._broadcaster = broadcaster
        self._jobs = jobs

    def _user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def _publish(self, room_id: int, event_type: ChatEvent, user: User, **payload) -> int:
        event = {
            "type": event_type.value,
            "user": {"id": user.user_id, "name": user.name},
            "timestamp": now_local().isoformat(),
            **payload,
        }
        return self._broadcaster.publish(room_topic(room_id), event)

    def _get_owned(self, actor_id: int, message_id: int) -> Message:
        message = self._messages.get_by_id(int(message_id))
        if not message:
            raise NotFoundError("Message not found")
        if message.user_id != int(actor_id):
            raise AuthorizationError("You can only modify your own messages")
        return message

    @staticmethod
    def _validated_content(content: Optional[str]) -> str:
        text = require_non_empty(content, "content")
        require_max_length(text, "content", MESSAGE_MAX_LENGTH)
        return text

    def list_messages(self, *, actor_id: int, room_id: int, page=None, per_page=None) -> Page[Message]:
        self._rooms.require_member(room_id=room_id, user_id=actor_id)
        paging = PageRequest.of(page, per_page, default_per_page=DEFAULT_MESSAGES_PER_PAGE)
        items, total = self._messages.list_for_room(int(room_id), offset=paging.offset, limit=paging.per_page)

        job = MarkMessagesAsReadJob(
            chat_room_id=int(room_id),
            user_id=int(actor_id),
            rooms=self._room_repo,
            messages=self._messages,
            users=self._users,
        )
        self._jobs.enqueue(job, name=job.name)
        return Page(items=list(items), page=paging.page, per_page=paging.per_page, total_count=total)

    def create(self, *, actor_id: int, room_id: int, content: Optional[str]) -> Message:
        self._rooms.require_member(room_id=room_id, user_id=actor_id)
        text = self._validated_content(content)
        user = self._user(actor_id)

        message_id = self._messages.create(chat_room_id=int(room_id), user_id=user.user_id, content=text)
        message = self._messages.get_by_id(message_id)
        self._publish(int(room_id), ChatEvent.NEW_MESSAGE, user, message=message_json(message))
        return message

    def update(self, *, actor_id: int, message_id: int, content: Optional[str]) -> Message:
        message = self._get_owned(actor_id, message_id)
        text = self._validated_content(content)
        self._messages.update_content(message_id=message.message_id, content=text)
        updated = self._messages.get_by_id(message.message_id)
        self._publish(message.chat_room_id, ChatEvent.MESSAGE_UPDATED, self._user(actor_id), message=message_json(updated))
        return updated

    def delete(self, *, actor_id: int, message_id: int) -> None:
        message = self._get_owned(actor_id, message_id)
        self._messages.delete_by_id(message.message_id)
        self._publish(message.chat_room_id, ChatEvent.MESSAGE_DELETED, self._user(actor_id), message_id=message.message_id)

    def read_all(self, *, actor_id: int, room_id: int, now: datetime | None = None) -> int:
        self._rooms.require_member(room_id=room_id, user_id=actor_id)
        count = self._messages.mark_read(room_id=int(room_id), reader_id=int(actor_id), read_at=now or now_local())
        if count:
            self._publish(int(room_id), ChatEvent.MESSAGE_READ, self._user(actor_id), count=count)
        return count

    def typing(self, *, actor_id: int, room_id: int, is_typing: bool = True) -> None:
        self._rooms.require_member(room_id=room_id, user_id=actor_id)
        self._publish(int(room_id), ChatEvent.TYPING, self._user(actor_id), is_typing=bool(is_typing))

    def user_status(self, *, actor_id: int, room_id: int, status: str) -> None:
        self._publish(int(room_id), ChatEvent.USER_STATUS, self._user(actor_id), status=status)
