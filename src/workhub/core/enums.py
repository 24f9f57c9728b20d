from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Global user role used for authorization."""

    ADMIN = "admin"
    MEMBER = "member"


class MembershipRole(str, Enum):
    """Role of a user inside an organization or a chat room."""

    ADMIN = "admin"
    MEMBER = "member"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AttendanceStatus(str, Enum):
    """Attendance status stored per user per work day."""

    PENDING = "pending"
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    HALF_DAY = "half_day"
    HOLIDAY = "holiday"


class LeaveType(str, Enum):
    PAID = "paid"
    SICK = "sick"
    OTHER = "other"


class LeaveStatus(str, Enum):
    """Approval flow of a leave request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class HistoryPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class Department(str, Enum):
    SALES = "sales"
    DEV = "dev"
    HR = "hr"


class ManualCategory(str, Enum):
    PROCEDURE = "procedure"
    RULES = "rules"
    SYSTEM = "system"


class AccessLevel(str, Enum):
    """Who may read a published manual."""

    ALL = "all"
    DEPARTMENT = "department"
    SPECIFIC = "specific"


class EditPermission(str, Enum):
    """Who may modify a manual."""

    AUTHOR = "author"
    DEPARTMENT = "department"
    SPECIFIC = "specific"


class ManualStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class ChatEvent(str, Enum):
    """Event types published on a chat room topic."""

    NEW_MESSAGE = "new_message"
    MESSAGE_UPDATED = "message_updated"
    MESSAGE_DELETED = "message_deleted"
    MESSAGE_READ = "message_read"
    TYPING = "typing"
    USER_STATUS = "user_status"
