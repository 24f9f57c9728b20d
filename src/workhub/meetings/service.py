from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..common.datetime_utils import now_local
from ..common.validators import parse_datetime_field, parse_int_field, require_non_empty
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..organizations.service import OrganizationService
from ..users.repository import UserRepository
from .model import Meeting, MeetingDetail
from .repository import MeetingRepository

logger = logging.getLogger(__name__)


class MeetingService:
    def __init__(self, meetings: MeetingRepository, users: UserRepository, organizations: OrganizationService):
        self._meetings = meetings
        self._users = users
        self._orgs = organizations

    def _get_or_404(self, meeting_id: int) -> Meeting:
        meeting = self._meetings.get_by_id(int(meeting_id))
        if not meeting:
            raise NotFoundError("Meeting not found")
        return meeting

    def _detail(self, meeting: Meeting) -> MeetingDetail:
        return MeetingDetail(meeting=meeting, participants=self._meetings.list_participants(meeting.meeting_id))

    def _get_for_organizer(self, actor_id: int, meeting_id: int) -> Meeting:
        meeting = self._get_or_404(meeting_id)
        if meeting.organizer_id != int(actor_id):
            raise AuthorizationError("Only the organizer can do that")
        return meeting

    def list_meetings(self, *, actor_id: int, organization_id=None) -> Sequence[MeetingDetail]:
        org_id = parse_int_field(organization_id, "organization_id")
        if org_id is not None:
            self._orgs.require_member(organization_id=org_id, user_id=actor_id)
        return [self._detail(m) for m in self._meetings.list_for_user(int(actor_id), organization_id=org_id)]

    def my_upcoming(self, *, actor_id: int, now: datetime | None = None) -> Sequence[MeetingDetail]:
        upcoming = self._meetings.list_for_user(int(actor_id), starting_after=now or now_local())
        return [self._detail(m) for m in upcoming]

    def get(self, *, actor_id: int, meeting_id: int) -> MeetingDetail:
        detail = self._detail(self._get_or_404(meeting_id))
        attendees = {p.user_id for p in detail.participants}
        if int(actor_id) != detail.meeting.organizer_id and int(actor_id) not in attendees:
            raise AuthorizationError("You are not invited to this meeting")
        return detail

    def create(self, *, actor_id: int, data: Dict[str, Any]) -> MeetingDetail:
        fields = self._validated_fields(actor_id, data, current=None)
        fields["organizer_id"] = int(actor_id)
        participant_ids: List[int] = []
        if data.get("participant_ids"):
            participant_ids, failures = self._resolve_users(data["participant_ids"])
            if failures:
                raise ValidationError("Some participants could not be added", errors=failures)

        meeting_id = self._meetings.create(fields=fields)
        logger.info("Meeting %s created by user %s", meeting_id, actor_id)
        for user_id in participant_ids:
            self._meetings.add_participant(meeting_id=meeting_id, user_id=user_id)
        return self._detail(self._get_or_404(meeting_id))

    def update(self, *, actor_id: int, meeting_id: int, data: Dict[str, Any]) -> MeetingDetail:
        meeting = self._get_for_organizer(actor_id, meeting_id)
        fields = self._validated_fields(actor_id, data, current=meeting)
        self._meetings.update_fields(meeting_id=meeting.meeting_id, fields=fields)
        return self._detail(self._get_or_404(meeting.meeting_id))

    def delete(self, *, actor_id: int, meeting_id: int) -> None:
        meeting = self._get_for_organizer(actor_id, meeting_id)
        self._meetings.delete_by_id(meeting.meeting_id)

    def add_participants(self, *, actor_id: int, meeting_id: int, user_ids: Sequence) -> MeetingDetail:
        """Adds every valid user; raises 422 listing the ones that failed."""
        meeting = self._get_for_organizer(actor_id, meeting_id)
        valid_ids, failures = self._resolve_users(user_ids)
        for user_id in valid_ids:
            if not self._meetings.add_participant(meeting_id=meeting.meeting_id, user_id=user_id):
                failures.append({"user_id": user_id, "error": "already a participant"})

        if failures:
            raise ValidationError("Some participants could not be added", errors=failures)
        return self._detail(meeting)

    def _resolve_users(self, user_ids) -> Tuple[List[int], List[Dict[str, Any]]]:
        if not isinstance(user_ids, (list, tuple)) or not user_ids:
            raise ValidationError("user_ids must be a non-empty list", errors={"user_ids": ["can't be blank"]})

        valid: List[int] = []
        failures: List[Dict[str, Any]] = []
        for raw in user_ids:
            try:
                user_id = parse_int_field(raw, "user_ids")
            except ValidationError:
                failures.append({"user_id": raw, "error": "is not a valid id"})
                continue
            if user_id is None or not self._users.get_by_id(user_id):
                failures.append({"user_id": raw, "error": "user not found"})
            elif user_id not in valid:
                valid.append(user_id)
        return valid, failures

    def remove_participant(self, *, actor_id: int, meeting_id: int, user_id: int) -> MeetingDetail:
        meeting = self._get_for_organizer(actor_id, meeting_id)
        if not self._meetings.remove_participant(meeting_id=meeting.meeting_id, user_id=int(user_id)):
            raise NotFoundError("User is not a participant of this meeting")
        return self._detail(meeting)

    def _validated_fields(self, actor_id: int, data: Dict[str, Any], *, current: Optional[Meeting]) -> Dict[str, Any]:
        fields: Dict[str, Any] = {}
        partial = current is not None

        if not partial or "title" in data:
            fields["title"] = require_non_empty(data.get("title"), "title")
        for key in ("agenda", "description", "location"):
            if key in data:
                fields[key] = data.get(key) or None

        for key in ("start_time", "end_time"):
            if not partial or key in data:
                value = parse_datetime_field(data.get(key), key)
                if value is None:
                    raise ValidationError(f"{key} can't be blank", errors={key: ["can't be blank"]})
                fields[key] = value

        start = fields.get("start_time", current.start_time if current else None)
        end = fields.get("end_time", current.end_time if current else None)
        if start and end and end <= start:
            raise ValidationError("end_time must be after start_time", errors={"end_time": ["must be after start_time"]})

        if "organization_id" in data:
            org_id = parse_int_field(data.get("organization_id"), "organization_id")
            if org_id is not None:
                self._orgs.require_member(organization_id=org_id, user_id=actor_id)
            fields["organization_id"] = org_id
        return fields
