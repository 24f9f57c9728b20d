"""In-memory repositories mirroring the MySQL ones, for service and HTTP tests."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

from werkzeug.security import generate_password_hash

from workhub.attendance.model import AttendanceRecord
from workhub.chat.model import ChatRoom, Message, RoomMember
from workhub.common.jobs import run_with_attempts
from workhub.container import Repositories
from workhub.core.constants import DEFAULT_JOB_ATTEMPTS
from workhub.core.enums import LeaveStatus, Role
from workhub.invitations.model import Invitation, RedeemOutcome
from workhub.leaves.model import LeaveRequest
from workhub.manuals.model import Manual
from workhub.manuals.policy import is_accessible
from workhub.meetings.model import Meeting, Participant
from workhub.organizations.model import Organization, OrganizationMember
from workhub.tasks.model import Task
from workhub.users.model import User

CREATED = datetime(2026, 1, 1, 9, 0, 0)


class _Ids:
    def __init__(self):
        self._next = 1

    def __call__(self) -> int:
        value = self._next
        self._next += 1
        return value


class FakeUserRepo:
    def __init__(self):
        self.users: dict[int, User] = {}
        self._ids = _Ids()

    def add(self, name, email, password="secret123", role=Role.MEMBER, department=None) -> User:
        uid = self.create_user(name=name, email=email, password_hash=generate_password_hash(password), role=role)
        self.users[uid] = replace(self.users[uid], department=department)
        return self.users[uid]

    def get_by_id(self, user_id):
        return self.users.get(int(user_id))

    def get_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    def list_all(self):
        return sorted(self.users.values(), key=lambda u: u.user_id)

    def list_by_ids(self, user_ids):
        return [self.users[i] for i in user_ids if i in self.users]

    def create_user(self, *, name, email, password_hash, role):
        uid = self._ids()
        self.users[uid] = User(
            user_id=uid, name=name, email=email, password_hash=password_hash, role=role, created_at=CREATED
        )
        return uid

    def update_profile(self, *, user_id, name, department, position, bio):
        u = self.users[user_id]
        self.users[user_id] = replace(u, name=name, department=department, position=position, bio=bio)
        return True

    def update_access(self, *, user_id, role, is_active):
        self.users[user_id] = replace(self.users[user_id], role=role, is_active=is_active)
        return True

    def update_password(self, *, user_id, password_hash):
        self.users[user_id] = replace(self.users[user_id], password_hash=password_hash)
        return True

    def touch_last_login(self, *, user_id, at):
        self.users[user_id] = replace(self.users[user_id], last_login_at=at)

    def delete_by_id(self, user_id):
        return self.users.pop(int(user_id), None) is not None


class FakeOrganizationRepo:
    def __init__(self, users: FakeUserRepo):
        self._users = users
        self.orgs: dict[int, Organization] = {}
        self.members: dict[tuple[int, int], object] = {}
        self._ids = _Ids()

    def create(self, *, name, description, invite_code):
        oid = self._ids()
        self.orgs[oid] = Organization(oid, name, description, invite_code, CREATED)
        return oid

    def get_by_id(self, organization_id):
        return self.orgs.get(int(organization_id))

    def get_by_invite_code(self, invite_code):
        return next((o for o in self.orgs.values() if o.invite_code == invite_code), None)

    def invite_code_exists(self, invite_code):
        return self.get_by_invite_code(invite_code) is not None

    def update_invite_code(self, *, organization_id, invite_code):
        self.orgs[organization_id] = replace(self.orgs[organization_id], invite_code=invite_code)
        return True

    def list_for_user(self, user_id):
        return [(self.orgs[o], role) for (o, u), role in self.members.items() if u == user_id]

    def list_ids_for_user(self, user_id):
        return [o for (o, u) in self.members if u == user_id]

    def add_member(self, *, organization_id, user_id, role):
        self.members[(organization_id, user_id)] = role

    def get_member_role(self, *, organization_id, user_id):
        return self.members.get((organization_id, user_id))

    def remove_member(self, *, organization_id, user_id):
        return self.members.pop((organization_id, user_id), None) is not None

    def list_members(self, organization_id):
        out = []
        for (o, u), role in self.members.items():
            if o == organization_id:
                user = self._users.users[u]
                out.append(OrganizationMember(user.user_id, user.name, user.email, role))
        return out


class FakeInvitationRepo:
    def __init__(self, organizations: FakeOrganizationRepo):
        self._organizations = organizations
        self.invitations: dict[int, Invitation] = {}
        self._ids = _Ids()

    def create(self, *, organization_id, code, expires_at, uses_allowed, created_by):
        iid = self._ids()
        self.invitations[iid] = Invitation(
            invitation_id=iid,
            organization_id=organization_id,
            code=code,
            expires_at=expires_at,
            uses_allowed=uses_allowed,
            uses_count=0,
            created_by=created_by,
            created_at=CREATED,
        )
        return iid

    def get_by_id(self, invitation_id):
        return self.invitations.get(int(invitation_id))

    def get_by_code(self, code):
        return next((i for i in self.invitations.values() if i.code == code), None)

    def code_exists(self, code):
        return self.get_by_code(code) is not None

    def list_for_organization(self, organization_id):
        return [i for i in self.invitations.values() if i.organization_id == organization_id]

    def delete_by_id(self, invitation_id):
        return self.invitations.pop(int(invitation_id), None) is not None

    def redeem(self, *, invitation_id, organization_id, user_id, role, now):
        inv = self.invitations.get(invitation_id)
        if inv is None or not inv.is_valid_for_use(now):
            return RedeemOutcome.EXHAUSTED
        if self._organizations.get_member_role(organization_id=organization_id, user_id=user_id):
            return RedeemOutcome.ALREADY_MEMBER
        self.invitations[invitation_id] = replace(inv, uses_count=inv.uses_count + 1)
        self._organizations.add_member(organization_id=organization_id, user_id=user_id, role=role)
        return RedeemOutcome.JOINED


class FakeTaskRepo:
    def __init__(self):
        self.tasks: dict[int, Task] = {}
        self._ids = _Ids()

    def create(self, *, fields):
        tid = self._ids()
        self.tasks[tid] = Task(
            task_id=tid,
            title=fields["title"],
            description=fields.get("description"),
            status=fields["status"],
            priority=fields["priority"],
            due_date=fields.get("due_date"),
            tags=tuple(fields.get("tags") or ()),
            user_id=fields["user_id"],
            assigned_to=fields.get("assigned_to"),
            organization_id=fields.get("organization_id"),
            parent_task_id=fields.get("parent_task_id"),
            created_at=datetime(2026, 1, 1, 9, 0, tid % 60),
        )
        return tid

    def get_by_id(self, task_id):
        return self.tasks.get(int(task_id))

    def update_fields(self, *, task_id, fields):
        if "tags" in fields:
            fields = {**fields, "tags": tuple(fields["tags"] or ())}
        self.tasks[task_id] = replace(self.tasks[task_id], **fields)
        return True

    def delete_by_id(self, task_id):
        removed = self.tasks.pop(int(task_id), None) is not None
        for sid in [t.task_id for t in self.tasks.values() if t.parent_task_id == task_id]:
            self.tasks.pop(sid)
        return removed

    def list_subtasks(self, parent_task_id):
        return [t for t in self.tasks.values() if t.parent_task_id == parent_task_id]

    def search(self, query, *, viewer_id, organization_ids, offset=0, limit=None):
        def visible(t: Task) -> bool:
            if query.only_mine:
                return viewer_id in (t.user_id, t.assigned_to)
            return viewer_id in (t.user_id, t.assigned_to) or t.organization_id in organization_ids

        items = [t for t in self.tasks.values() if t.parent_task_id is None and visible(t)]
        if query.status:
            items = [t for t in items if t.status == query.status]
        if query.priority:
            items = [t for t in items if t.priority == query.priority]
        if query.tag:
            items = [t for t in items if query.tag in t.tags]
        if query.organization_id is not None:
            items = [t for t in items if t.organization_id == query.organization_id]
        if query.due_from:
            items = [t for t in items if t.due_date and t.due_date >= query.due_from]
        if query.due_to:
            items = [t for t in items if t.due_date and t.due_date <= query.due_to]
        items.sort(key=lambda t: t.created_at, reverse=query.direction == "desc")
        total = len(items)
        end = None if limit is None else offset + limit
        return items[offset:end], total


class FakeChatRoomRepo:
    def __init__(self, users: FakeUserRepo):
        self._users = users
        self.rooms: dict[int, ChatRoom] = {}
        self.members: dict[tuple[int, int], object] = {}
        self._ids = _Ids()

    def create_room(self, *, name, is_direct_message, organization_id):
        rid = self._ids()
        self.rooms[rid] = ChatRoom(rid, name, is_direct_message, organization_id, CREATED)
        return rid

    def get_by_id(self, room_id):
        return self.rooms.get(int(room_id))

    def update_name(self, *, room_id, name):
        self.rooms[room_id] = replace(self.rooms[room_id], name=name)
        return True

    def delete_by_id(self, room_id):
        return self.rooms.pop(int(room_id), None) is not None

    def list_for_user(self, user_id):
        return [self.rooms[r] for (r, u) in self.members if u == user_id and r in self.rooms]

    def find_direct_room(self, user_a, user_b):
        for room in self.rooms.values():
            ids = {u for (r, u) in self.members if r == room.room_id}
            if room.is_direct_message and ids == {user_a, user_b}:
                return room
        return None

    def add_member(self, *, room_id, user_id, role):
        self.members[(room_id, user_id)] = role

    def get_member_role(self, *, room_id, user_id):
        return self.members.get((room_id, user_id))

    def remove_member(self, *, room_id, user_id):
        return self.members.pop((room_id, user_id), None) is not None

    def list_members(self, room_id):
        return [
            RoomMember(u, self._users.users[u].name, role) for (r, u), role in self.members.items() if r == room_id
        ]


class FakeMessageRepo:
    def __init__(self, users: FakeUserRepo):
        self._users = users
        self.messages: dict[int, Message] = {}
        self._ids = _Ids()

    def create(self, *, chat_room_id, user_id, content):
        mid = self._ids()
        self.messages[mid] = Message(
            message_id=mid,
            chat_room_id=chat_room_id,
            user_id=user_id,
            content=content,
            created_at=datetime(2026, 1, 1, 10, 0, mid % 60),
            author_name=self._users.users[user_id].name,
        )
        return mid

    def get_by_id(self, message_id):
        return self.messages.get(int(message_id))

    def update_content(self, *, message_id, content):
        self.messages[message_id] = replace(self.messages[message_id], content=content)
        return True

    def delete_by_id(self, message_id):
        return self.messages.pop(int(message_id), None) is not None

    def list_for_room(self, room_id, *, offset, limit):
        items = sorted(
            (m for m in self.messages.values() if m.chat_room_id == room_id),
            key=lambda m: m.message_id,
            reverse=True,
        )
        return items[offset:offset + limit], len(items)

    def mark_read(self, *, room_id, reader_id, read_at, limit=None):
        unread = sorted(
            (m for m in self.messages.values() if m.chat_room_id == room_id and m.user_id != reader_id and not m.read),
            key=lambda m: m.message_id,
        )
        if limit is not None:
            unread = unread[:limit]
        for m in unread:
            self.messages[m.message_id] = replace(m, read=True, read_at=read_at)
        return len(unread)


class FakeManualRepo:
    def __init__(self, users: FakeUserRepo):
        self._users = users
        self.manuals: dict[int, Manual] = {}
        self._ids = _Ids()

    def create(self, *, fields):
        mid = self._ids()
        self.manuals[mid] = Manual(
            manual_id=mid,
            user_id=fields["user_id"],
            title=fields["title"],
            content=fields["content"],
            department=fields["department"],
            category=fields["category"],
            access_level=fields["access_level"],
            edit_permission=fields["edit_permission"],
            status=fields["status"],
            tags=tuple(fields.get("tags") or ()),
            created_at=CREATED,
            updated_at=datetime(2026, 1, 2, 9, 0, mid % 60),
            author_name=self._users.users[fields["user_id"]].name,
        )
        return mid

    def get_by_id(self, manual_id):
        return self.manuals.get(int(manual_id))

    def update_fields(self, *, manual_id, fields):
        self.manuals[manual_id] = replace(self.manuals[manual_id], **fields)
        return True

    def delete_by_id(self, manual_id):
        return self.manuals.pop(int(manual_id), None) is not None

    def search(self, query, *, viewer, offset=0, limit=None):
        if query.only_author:
            items = [m for m in self.manuals.values() if m.user_id == viewer.user_id]
        else:
            items = [m for m in self.manuals.values() if is_accessible(m, viewer)]
        if query.department:
            items = [m for m in items if m.department == query.department]
        if query.category:
            items = [m for m in items if m.category == query.category]
        if query.status:
            items = [m for m in items if m.status == query.status]
        if query.title:
            items = [m for m in items if query.title.lower() in m.title.lower()]
        if query.content:
            items = [m for m in items if query.content.lower() in m.content.lower()]
        if query.author_id is not None:
            items = [m for m in items if m.user_id == query.author_id]
        items.sort(key=lambda m: getattr(m, query.order_by), reverse=query.order == "desc")
        end = None if limit is None else offset + limit
        return items[offset:end], len(items)


class FakeMeetingRepo:
    def __init__(self, users: FakeUserRepo):
        self._users = users
        self.meetings: dict[int, Meeting] = {}
        self.participants: set[tuple[int, int]] = set()
        self._ids = _Ids()

    def create(self, *, fields):
        mid = self._ids()
        self.meetings[mid] = Meeting(
            meeting_id=mid,
            title=fields["title"],
            agenda=fields.get("agenda"),
            description=fields.get("description"),
            location=fields.get("location"),
            start_time=fields["start_time"],
            end_time=fields["end_time"],
            organizer_id=fields["organizer_id"],
            organization_id=fields.get("organization_id"),
            created_at=CREATED,
        )
        return mid

    def get_by_id(self, meeting_id):
        return self.meetings.get(int(meeting_id))

    def update_fields(self, *, meeting_id, fields):
        self.meetings[meeting_id] = replace(self.meetings[meeting_id], **fields)
        return True

    def delete_by_id(self, meeting_id):
        return self.meetings.pop(int(meeting_id), None) is not None

    def list_for_user(self, user_id, *, organization_id=None, starting_after=None):
        items = [
            m
            for m in self.meetings.values()
            if m.organizer_id == user_id or (m.meeting_id, user_id) in self.participants
        ]
        if organization_id is not None:
            items = [m for m in items if m.organization_id == organization_id]
        if starting_after is not None:
            items = [m for m in items if m.start_time >= starting_after]
        return sorted(items, key=lambda m: m.start_time)

    def add_participant(self, *, meeting_id, user_id):
        if (meeting_id, user_id) in self.participants:
            return False
        self.participants.add((meeting_id, user_id))
        return True

    def remove_participant(self, *, meeting_id, user_id):
        if (meeting_id, user_id) not in self.participants:
            return False
        self.participants.discard((meeting_id, user_id))
        return True

    def list_participants(self, meeting_id):
        return [
            Participant(u, self._users.users[u].name) for (m, u) in sorted(self.participants) if m == meeting_id
        ]


class FakeAttendanceRepo:
    def __init__(self):
        self.records: dict[tuple[int, date], AttendanceRecord] = {}
        self._ids = _Ids()

    def add(self, record: AttendanceRecord) -> None:
        self.records[(record.user_id, record.work_date)] = record

    def get_for_user_and_date(self, user_id, work_date):
        return self.records.get((user_id, work_date))

    def create_checkin(self, *, user_id, work_date, check_in_time, status, note=None):
        aid = self._ids()
        self.records[(user_id, work_date)] = AttendanceRecord(
            attendance_id=aid,
            user_id=user_id,
            work_date=work_date,
            check_in_time=check_in_time,
            check_out_time=None,
            status=status,
            note=note,
        )
        return aid

    def _by_id(self, attendance_id):
        return next((k, r) for k, r in self.records.items() if r.attendance_id == attendance_id)

    def update_checkout(self, *, attendance_id, check_out_time, status, total_hours, overtime_hours, note=None):
        key, rec = self._by_id(attendance_id)
        if rec.check_out_time is not None:
            return False
        self.records[key] = replace(
            rec,
            check_out_time=check_out_time,
            status=status,
            total_hours=total_hours,
            overtime_hours=overtime_hours,
            note=note,
        )
        return True

    def update_record(self, *, attendance_id, check_in_time, check_out_time, status, total_hours, overtime_hours, note=None):
        key, rec = self._by_id(attendance_id)
        self.records[key] = replace(
            rec,
            check_in_time=check_in_time,
            check_out_time=check_out_time,
            status=status,
            total_hours=total_hours,
            overtime_hours=overtime_hours,
            note=note,
        )
        return True

    def list_for_user_between(self, user_id, start, end):
        return sorted(
            (r for (u, d), r in self.records.items() if u == user_id and start <= d <= end),
            key=lambda r: r.work_date,
        )


class FakeLeaveRepo:
    def __init__(self):
        self.requests: dict[int, LeaveRequest] = {}
        self._ids = _Ids()

    def create(self, *, user_id, leave_type, start_date, end_date, reason):
        rid = self._ids()
        self.requests[rid] = LeaveRequest(
            request_id=rid,
            user_id=user_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            status=LeaveStatus.PENDING,
            created_at=CREATED,
        )
        return rid

    def get_by_id(self, request_id):
        return self.requests.get(int(request_id))

    def list_requests(self, *, user_id=None, status=None, limit=200):
        items = [
            r
            for r in self.requests.values()
            if (user_id is None or r.user_id == user_id) and (status is None or r.status == status)
        ]
        return items[:limit]

    def list_overlapping(self, *, user_id, start, end, status=None):
        return [
            r
            for r in self.requests.values()
            if r.user_id == user_id
            and r.start_date <= end
            and r.end_date >= start
            and (status is None or r.status == status)
        ]

    def decide(self, *, request_id, status, decided_by, decided_at):
        req = self.requests.get(request_id)
        if not req or req.status != LeaveStatus.PENDING:
            return False
        self.requests[request_id] = replace(req, status=status, decided_by=decided_by, decided_at=decided_at)
        return True


def fake_repositories() -> Repositories:
    users = FakeUserRepo()
    organizations = FakeOrganizationRepo(users)
    return Repositories(
        users=users,
        organizations=organizations,
        invitations=FakeInvitationRepo(organizations),
        tasks=FakeTaskRepo(),
        chat_rooms=FakeChatRoomRepo(users),
        messages=FakeMessageRepo(users),
        manuals=FakeManualRepo(users),
        meetings=FakeMeetingRepo(users),
        attendance=FakeAttendanceRepo(),
        leaves=FakeLeaveRepo(),
    )


class InlineJobRunner:
    """Runs jobs synchronously in the caller's thread."""

    def __init__(self, *, attempts: int = DEFAULT_JOB_ATTEMPTS):
        self._attempts = attempts
        self.completed: list[str] = []

    def enqueue(self, job, *, name: str) -> None:
        if run_with_attempts(job, name=name, attempts=self._attempts, retry_delay=0, sleep=lambda _: None):
            self.completed.append(name)
