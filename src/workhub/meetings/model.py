from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence


@dataclass(frozen=True)
class Meeting:
    meeting_id: int
    title: str
    agenda: Optional[str]
    description: Optional[str]
    location: Optional[str]
    start_time: datetime
    end_time: datetime
    organizer_id: int
    organization_id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Participant:
    user_id: int
    name: str


@dataclass(frozen=True)
class MeetingDetail:
    meeting: Meeting
    participants: Sequence[Participant]
