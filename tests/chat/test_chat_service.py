from __future__ import annotations

import pytest

from workhub.chat.broadcaster import room_topic
from workhub.chat.jobs import MarkMessagesAsReadJob
from workhub.core.enums import MembershipRole
from workhub.core.exceptions import AuthorizationError, NotFoundError, ValidationError


@pytest.fixture
def room(container, admin, member):
    return container.chat_room_service.create_group(actor_id=admin.user_id, name="general", user_ids=[member.user_id])


def test_group_creator_is_admin(container, room, admin, member):
    roles = {m.user_id: m.role for m in room.members}

    assert roles == {admin.user_id: MembershipRole.ADMIN, member.user_id: MembershipRole.MEMBER}


def test_direct_message_is_get_or_create(container, admin, member):
    first = container.chat_room_service.direct_message(actor_id=admin.user_id, other_user_id=member.user_id)
    second = container.chat_room_service.direct_message(actor_id=member.user_id, other_user_id=admin.user_id)

    assert first.room.room_id == second.room.room_id
    assert first.room.is_direct_message
    assert first.room.name == "DM"


def test_direct_message_with_self_rejected(container, admin):
    with pytest.raises(ValidationError):
        container.chat_room_service.direct_message(actor_id=admin.user_id, other_user_id=admin.user_id)


def test_new_message_is_broadcast_only_to_its_room(container, admin, member, room):
    other = container.chat_room_service.create_group(actor_id=admin.user_id, name="random")
    in_room = container.broadcaster.subscribe(room_topic(room.room.room_id))
    elsewhere = container.broadcaster.subscribe(room_topic(other.room.room_id))

    message = container.message_service.create(actor_id=member.user_id, room_id=room.room.room_id, content="hello")

    events = in_room.drain()
    assert [e["type"] for e in events] == ["new_message"]
    assert events[0]["message"]["id"] == message.message_id
    assert events[0]["user"] == {"id": member.user_id, "name": member.name}
    assert elsewhere.drain() == []


def test_non_member_cannot_post(container, room, outsider):
    with pytest.raises(AuthorizationError):
        container.message_service.create(actor_id=outsider.user_id, room_id=room.room.room_id, content="hi")


def test_blank_or_oversized_message_rejected(container, room, member, repos):
    with pytest.raises(ValidationError):
        container.message_service.create(actor_id=member.user_id, room_id=room.room.room_id, content="  ")
    with pytest.raises(ValidationError):
        container.message_service.create(actor_id=member.user_id, room_id=room.room.room_id, content="x" * 2001)

    assert repos.messages.messages == {}


def test_only_author_can_edit_message(container, room, admin, member):
    message = container.message_service.create(actor_id=member.user_id, room_id=room.room.room_id, content="draft")

    with pytest.raises(AuthorizationError):
        container.message_service.update(actor_id=admin.user_id, message_id=message.message_id, content="hijack")

    updated = container.message_service.update(actor_id=member.user_id, message_id=message.message_id, content="final")
    assert updated.content == "final"


def test_listing_messages_marks_others_messages_read(container, jobs, room, admin, member, repos):
    for text in ("one", "two"):
        container.message_service.create(actor_id=admin.user_id, room_id=room.room.room_id, content=text)
    own = container.message_service.create(actor_id=member.user_id, room_id=room.room.room_id, content="mine")

    page = container.message_service.list_messages(actor_id=member.user_id, room_id=room.room.room_id)

    assert page.total_count == 3
    assert page.items[0].message_id == own.message_id
    assert len(jobs.completed) == 1
    read = {m.message_id: m.read for m in repos.messages.messages.values()}
    assert read[own.message_id] is False
    assert sum(read.values()) == 2


def test_mark_read_job_for_missing_room_raises(repos, member):
    job = MarkMessagesAsReadJob(
        chat_room_id=999,
        user_id=member.user_id,
        rooms=repos.chat_rooms,
        messages=repos.messages,
        users=repos.users,
    )

    with pytest.raises(NotFoundError):
        job()


def test_read_all_publishes_count(container, room, admin, member):
    container.message_service.create(actor_id=admin.user_id, room_id=room.room.room_id, content="ping")
    sub = container.broadcaster.subscribe(room_topic(room.room.room_id))

    count = container.message_service.read_all(actor_id=member.user_id, room_id=room.room.room_id)

    assert count == 1
    assert sub.drain()[0]["type"] == "message_read"


def test_cannot_add_members_to_direct_message(container, admin, member, outsider):
    dm = container.chat_room_service.direct_message(actor_id=admin.user_id, other_user_id=member.user_id)
    # DM members are plain members, so the admin check fails first
    with pytest.raises(AuthorizationError):
        container.chat_room_service.add_members(actor_id=admin.user_id, room_id=dm.room.room_id, user_ids=[outsider.user_id])


def test_room_admin_removes_member(container, room, admin, member):
    view = container.chat_room_service.remove_member(actor_id=admin.user_id, room_id=room.room.room_id, user_id=member.user_id)

    assert [m.user_id for m in view.members] == [admin.user_id]
    with pytest.raises(NotFoundError):
        container.chat_room_service.remove_member(
            actor_id=admin.user_id, room_id=room.room.room_id, user_id=member.user_id
        )
