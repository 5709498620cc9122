import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "church_attendance"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Consecutive absent Sundays/schedules before an alert is raised
ABSENCE_ALERT_THRESHOLD = int(os.getenv("ABSENCE_ALERT_THRESHOLD", "3"))
# Number of recent schedules scanned for roster-wide alerts
ROSTER_WINDOW_SCHEDULES = int(os.getenv("ROSTER_WINDOW_SCHEDULES", "10"))

# Seconds before cached record lists are refetched; bound on cached queries
RECORD_CACHE_TTL_SECONDS = float(os.getenv("RECORD_CACHE_TTL_SECONDS", "30"))
RECORD_CACHE_MAX_ENTRIES = int(os.getenv("RECORD_CACHE_MAX_ENTRIES", "512"))

# If enabled, app applies schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
