import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "workhub_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

SESSION_DAYS = 1
APP_BASE_URL = "http://testserver"

WORKDAY_START = "09:00"
LATE_GRACE_MINUTES = 5
STANDARD_WORK_HOURS = 8.0
HALF_DAY_HOURS = 4.0

JOB_WORKERS = 1
CHAT_KEEPALIVE_SECONDS = 1
