from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from .attendance.calculator.standard_calculator import StandardHoursCalculator
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.report import AttendanceReportService
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .chat.broadcaster import Broadcaster
from .chat.mysql_chat_repository import MySQLChatRoomRepository, MySQLMessageRepository
from .chat.repository import ChatRoomRepository, MessageRepository
from .chat.service import ChatRoomService, MessageService
from .common.datetime_utils import parse_hhmm
from .common.jobs import JobRunner, ThreadPoolJobRunner
from .core import constants
from .database.connection import DBConfig, DatabaseConnection
from .invitations.mysql_invitation_repository import MySQLInvitationRepository
from .invitations.repository import InvitationRepository
from .invitations.service import InvitationService
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .leaves.service import LeaveService
from .manuals.mysql_manual_repository import MySQLManualRepository
from .manuals.repository import ManualRepository
from .manuals.service import ManualService
from .meetings.mysql_meeting_repository import MySQLMeetingRepository
from .meetings.repository import MeetingRepository
from .meetings.service import MeetingService
from .organizations.mysql_organization_repository import MySQLOrganizationRepository
from .organizations.repository import OrganizationRepository
from .organizations.service import OrganizationService
from .tasks.mysql_task_repository import MySQLTaskRepository
from .tasks.repository import TaskRepository
from .tasks.service import TaskService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Repositories:
    users: UserRepository
    organizations: OrganizationRepository
    invitations: InvitationRepository
    tasks: TaskRepository
    chat_rooms: ChatRoomRepository
    messages: MessageRepository
    manuals: ManualRepository
    meetings: MeetingRepository
    attendance: AttendanceRepository
    leaves: LeaveRepository


@dataclass(frozen=True)
class Container:
    repos: Repositories
    broadcaster: Broadcaster
    jobs: JobRunner
    health_check: Callable[[], None]

    auth_service: AuthService
    user_service: UserService
    organization_service: OrganizationService
    invitation_service: InvitationService
    task_service: TaskService
    chat_room_service: ChatRoomService
    message_service: MessageService
    manual_service: ManualService
    meeting_service: MeetingService
    attendance_service: AttendanceService
    attendance_report_service: AttendanceReportService
    leave_service: LeaveService


def _setting(settings: Any, name: str, default):
    return getattr(settings, name, default) if settings is not None else default


def wire(
    repos: Repositories,
    *,
    settings: Any = None,
    jobs: Optional[JobRunner] = None,
    broadcaster: Optional[Broadcaster] = None,
    health_check: Optional[Callable[[], None]] = None,
) -> Container:
    """Build every service on top of the given repositories."""
    broadcaster = broadcaster or Broadcaster(queue_size=constants.SUBSCRIBER_QUEUE_SIZE)
    jobs = jobs or ThreadPoolJobRunner(
        max_workers=int(_setting(settings, "JOB_WORKERS", constants.DEFAULT_JOB_WORKERS)),
        attempts=constants.DEFAULT_JOB_ATTEMPTS,
        retry_delay=constants.DEFAULT_JOB_RETRY_DELAY_SECONDS,
    )

    organization_service = OrganizationService(repos.organizations, repos.users)
    chat_room_service = ChatRoomService(repos.chat_rooms, repos.users, organization_service)
    attendance_service = AttendanceService(
        repos.attendance,
        repos.users,
        workday_start=parse_hhmm(str(_setting(settings, "WORKDAY_START", constants.DEFAULT_WORKDAY_START))),
        strategy_factory=AttendanceStrategyFactory(),
        calculator=StandardHoursCalculator(
            float(_setting(settings, "STANDARD_WORK_HOURS", constants.STANDARD_WORK_HOURS))
        ),
        grace_minutes=int(_setting(settings, "LATE_GRACE_MINUTES", constants.DEFAULT_LATE_GRACE_MINUTES)),
        half_day_hours=float(_setting(settings, "HALF_DAY_HOURS", constants.HALF_DAY_HOURS)),
    )

    return Container(
        repos=repos,
        broadcaster=broadcaster,
        jobs=jobs,
        health_check=health_check or (lambda: None),
        auth_service=AuthService(repos.users),
        user_service=UserService(repos.users),
        organization_service=organization_service,
        invitation_service=InvitationService(repos.invitations, repos.organizations, organization_service),
        task_service=TaskService(repos.tasks, repos.users, organization_service),
        chat_room_service=chat_room_service,
        message_service=MessageService(
            chat_room_service,
            repos.chat_rooms,
            repos.messages,
            repos.users,
            broadcaster=broadcaster,
            jobs=jobs,
        ),
        manual_service=ManualService(repos.manuals, repos.users),
        meeting_service=MeetingService(repos.meetings, repos.users, organization_service),
        attendance_service=attendance_service,
        attendance_report_service=AttendanceReportService(
            repos.attendance,
            repos.leaves,
            paid_leave_days=int(_setting(settings, "PAID_LEAVE_DAYS", constants.PAID_LEAVE_DAYS)),
            sick_leave_days=int(_setting(settings, "SICK_LEAVE_DAYS", constants.SICK_LEAVE_DAYS)),
        ),
        leave_service=LeaveService(repos.leaves, repos.users),
    )


def build_container(*, db_config: dict, settings: Any = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    repos = Repositories(
        users=MySQLUserRepository(conn),
        organizations=MySQLOrganizationRepository(conn),
        invitations=MySQLInvitationRepository(conn),
        tasks=MySQLTaskRepository(conn),
        chat_rooms=MySQLChatRoomRepository(conn),
        messages=MySQLMessageRepository(conn),
        manuals=MySQLManualRepository(conn),
        meetings=MySQLMeetingRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        leaves=MySQLLeaveRepository(conn),
    )
    return wire(repos, settings=settings, health_check=conn.ping)
