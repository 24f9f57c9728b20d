from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from ..common.datetime_utils import now_local
from ..core.constants import MARK_READ_BATCH_LIMIT
from ..core.exceptions import NotFoundError
from ..users.repository import UserRepository
from .repository import ChatRoomRepository, MessageRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkMessagesAsReadJob:
    """Marks a bounded batch of other people's unread messages in a room as read."""

    chat_room_id: int
    user_id: int
    rooms: ChatRoomRepository
    messages: MessageRepository
    users: UserRepository
    clock: Callable[[], datetime] = now_local

    @property
    def name(self) -> str:
        return f"mark_messages_as_read(room={self.chat_room_id}, user={self.user_id})"

    def __call__(self) -> int:
        if not self.rooms.get_by_id(self.chat_room_id):
            raise NotFoundError(f"Chat room {self.chat_room_id} not found")
        if not self.users.get_by_id(self.user_id):
            raise NotFoundError(f"User {self.user_id} not found")

        count = self.messages.mark_read(
            room_id=self.chat_room_id,
            reader_id=self.user_id,
            read_at=self.clock(),
            limit=MARK_READ_BATCH_LIMIT,
        )
        if count:
            logger.debug("Marked %d messages read in room %s for user %s", count, self.chat_room_id, self.user_id)
        return count
