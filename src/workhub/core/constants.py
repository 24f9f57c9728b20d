"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7

# Users
NAME_MAX_LENGTH = 50
BIO_MAX_LENGTH = 1000
PROFILE_FIELD_MAX_LENGTH = 100
SIGNUP_PASSWORD_MIN_LENGTH = 6
CHANGE_PASSWORD_MIN_LENGTH = 8

# Organizations / invitations
ORGANIZATION_NAME_MAX_LENGTH = 100
ORGANIZATION_DESCRIPTION_MAX_LENGTH = 500
ORGANIZATION_CODE_LENGTH = 8
INVITATION_CODE_LENGTH = 10
DEFAULT_INVITATION_HOURS = 24

# Pagination
DEFAULT_TASKS_PER_PAGE = 10
DEFAULT_MESSAGES_PER_PAGE = 20
DEFAULT_MANUALS_PER_PAGE = 10
MAX_PER_PAGE = 100

# Tasks
DASHBOARD_RECENT_LIMIT = 5
DASHBOARD_UPCOMING_DAYS = 7

# Chat
MESSAGE_MAX_LENGTH = 2000
MARK_READ_BATCH_LIMIT = 100
DIRECT_MESSAGE_ROOM_NAME = "DM"
SUBSCRIBER_QUEUE_SIZE = 100
DEFAULT_KEEPALIVE_SECONDS = 15

# Jobs
DEFAULT_JOB_WORKERS = 4
DEFAULT_JOB_ATTEMPTS = 3
DEFAULT_JOB_RETRY_DELAY_SECONDS = 1.0

# Attendance
DEFAULT_WORKDAY_START = "09:00"
DEFAULT_LATE_GRACE_MINUTES = 5
STANDARD_WORK_HOURS = 8.0
HALF_DAY_HOURS = 4.0
PAID_LEAVE_DAYS = 15
SICK_LEAVE_DAYS = 5
