"""Constants and defaults.

Note: these are defaults only. Services receive the actual values from the
settings module through the container.
"""

DEFAULT_ABSENCE_THRESHOLD = 3
DEFAULT_ROSTER_WINDOW_SCHEDULES = 10
DEFAULT_LOG_LEVEL = "INFO"

# Cached record lists are refetched after this many seconds even without a
# local write, so changes made through other workers show up.
DEFAULT_CACHE_TTL_SECONDS = 30.0
DEFAULT_CACHE_MAX_ENTRIES = 512
