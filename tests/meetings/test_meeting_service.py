from __future__ import annotations

from datetime import datetime

import pytest

from workhub.core.exceptions import AuthorizationError, NotFoundError, ValidationError


def _data(**overrides):
    data = {
        "title": "Planning",
        "start_time": "2026-03-03T10:00:00",
        "end_time": "2026-03-03T11:00:00",
        "location": "Room 1",
    }
    data.update(overrides)
    return data


def test_end_must_follow_start(container, admin, repos):
    with pytest.raises(ValidationError):
        container.meeting_service.create(actor_id=admin.user_id, data=_data(end_time="2026-03-03T09:00:00"))

    assert repos.meetings.meetings == {}


def test_missing_start_time_rejected(container, admin):
    with pytest.raises(ValidationError):
        container.meeting_service.create(actor_id=admin.user_id, data=_data(start_time=None))


def test_create_with_participants(container, admin, member):
    detail = container.meeting_service.create(actor_id=admin.user_id, data=_data(participant_ids=[member.user_id]))

    assert detail.meeting.organizer_id == admin.user_id
    assert [p.user_id for p in detail.participants] == [member.user_id]


def test_unknown_participant_rejects_whole_meeting(container, admin, member, repos):
    with pytest.raises(ValidationError) as exc:
        container.meeting_service.create(actor_id=admin.user_id, data=_data(participant_ids=[member.user_id, 9999]))

    assert exc.value.errors == [{"user_id": 9999, "error": "user not found"}]
    assert repos.meetings.meetings == {}


def test_non_participant_cannot_view(container, admin, outsider):
    detail = container.meeting_service.create(actor_id=admin.user_id, data=_data())

    with pytest.raises(AuthorizationError):
        container.meeting_service.get(actor_id=outsider.user_id, meeting_id=detail.meeting.meeting_id)


def test_add_participants_reports_failures(container, admin, member):
    detail = container.meeting_service.create(actor_id=admin.user_id, data=_data(participant_ids=[member.user_id]))

    with pytest.raises(ValidationError) as exc:
        container.meeting_service.add_participants(
            actor_id=admin.user_id, meeting_id=detail.meeting.meeting_id, user_ids=[member.user_id, 999]
        )

    reasons = {f["user_id"]: f["error"] for f in exc.value.errors}
    assert reasons == {member.user_id: "already a participant", 999: "user not found"}


def test_only_organizer_updates(container, admin, member):
    detail = container.meeting_service.create(actor_id=admin.user_id, data=_data(participant_ids=[member.user_id]))

    with pytest.raises(AuthorizationError):
        container.meeting_service.update(actor_id=member.user_id, meeting_id=detail.meeting.meeting_id, data={"title": "x"})

    with pytest.raises(ValidationError):
        container.meeting_service.update(
            actor_id=admin.user_id,
            meeting_id=detail.meeting.meeting_id,
            data={"end_time": "2026-03-03T09:30:00"},
        )


def test_remove_unknown_participant_is_not_found(container, admin, outsider):
    detail = container.meeting_service.create(actor_id=admin.user_id, data=_data())

    with pytest.raises(NotFoundError):
        container.meeting_service.remove_participant(
            actor_id=admin.user_id, meeting_id=detail.meeting.meeting_id, user_id=outsider.user_id
        )


def test_my_upcoming_excludes_past_meetings(container, admin, member):
    container.meeting_service.create(
        actor_id=admin.user_id,
        data=_data(title="past", start_time="2026-03-01T10:00:00", end_time="2026-03-01T11:00:00"),
    )
    container.meeting_service.create(actor_id=admin.user_id, data=_data(title="next"))

    upcoming = container.meeting_service.my_upcoming(actor_id=admin.user_id, now=datetime(2026, 3, 2, 9, 0))

    assert [d.meeting.title for d in upcoming] == ["next"]
