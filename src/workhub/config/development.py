import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "workhub"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

SESSION_DAYS = int(os.getenv("SESSION_DAYS", "7"))
APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:5000")

WORKDAY_START = os.getenv("WORKDAY_START", "09:00")
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "5"))
STANDARD_WORK_HOURS = float(os.getenv("STANDARD_WORK_HOURS", "8"))
HALF_DAY_HOURS = float(os.getenv("HALF_DAY_HOURS", "4"))

JOB_WORKERS = int(os.getenv("JOB_WORKERS", "2"))
CHAT_KEEPALIVE_SECONDS = int(os.getenv("CHAT_KEEPALIVE_SECONDS", "15"))
