import os

SECRET_KEY = os.environ["SECRET_KEY"]

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "workhub"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "workhub"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = False

SESSION_DAYS = int(os.getenv("SESSION_DAYS", "7"))
APP_BASE_URL = os.getenv("APP_BASE_URL", "https://workhub.example.com")

WORKDAY_START = os.getenv("WORKDAY_START", "09:00")
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "5"))
STANDARD_WORK_HOURS = float(os.getenv("STANDARD_WORK_HOURS", "8"))
HALF_DAY_HOURS = float(os.getenv("HALF_DAY_HOURS", "4"))

JOB_WORKERS = int(os.getenv("JOB_WORKERS", "4"))
CHAT_KEEPALIVE_SECONDS = int(os.getenv("CHAT_KEEPALIVE_SECONDS", "15"))
