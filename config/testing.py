import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "church_attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

ABSENCE_ALERT_THRESHOLD = 3
ROSTER_WINDOW_SCHEDULES = 10
RECORD_CACHE_TTL_SECONDS = 30.0
RECORD_CACHE_MAX_ENTRIES = 512

AUTO_INIT_DB = False
