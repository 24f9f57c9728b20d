from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Protocol, Sequence

from .model import Meeting, Participant


class MeetingRepository(Protocol):
    def create(self, *, fields: Dict[str, Any]) -> int:
        raise NotImplementedError

    def get_by_id(self, meeting_id: int) -> Optional[Meeting]:
        raise NotImplementedError

    def update_fields(self, *, meeting_id: int, fields: Dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete_by_id(self, meeting_id: int) -> bool:
        raise NotImplementedError

    def list_for_user(
        self,
        user_id: int,
        *,
        organization_id: Optional[int] = None,
        starting_after: Optional[datetime] = None,
    ) -> Sequence[Meeting]:
        """Meetings the user organizes or attends, ordered by start time."""
        raise NotImplementedError

    def add_participant(self, *, meeting_id: int, user_id: int) -> bool:
        """False when the user already participates."""
        raise NotImplementedError

    def remove_participant(self, *, meeting_id: int, user_id: int) -> bool:
        raise NotImplementedError

    def list_participants(self, meeting_id: int) -> Sequence[Participant]:
        raise NotImplementedError
