import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "attendance"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "church_attendance"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

ABSENCE_ALERT_THRESHOLD = int(os.getenv("ABSENCE_ALERT_THRESHOLD", "3"))
ROSTER_WINDOW_SCHEDULES = int(os.getenv("ROSTER_WINDOW_SCHEDULES", "10"))
RECORD_CACHE_TTL_SECONDS = float(os.getenv("RECORD_CACHE_TTL_SECONDS", "30"))
RECORD_CACHE_MAX_ENTRIES = int(os.getenv("RECORD_CACHE_MAX_ENTRIES", "2048"))

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
