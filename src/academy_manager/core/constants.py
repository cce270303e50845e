"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_UPCOMING_LIMIT = 10
DASHBOARD_EVENT_LIMIT = 3

DEFAULT_EVENT_DURATION_MINUTES = 90
DEFAULT_LOCATION = "Γήπεδο Ακαδημίας"
DEFAULT_ACADEMY_NAME = "Ηρακλής"
DEFAULT_AGE_GROUP = "Open"

# Sweep runs every 5 minutes unless configured otherwise.
DEFAULT_SWEEP_INTERVAL_SECONDS = 300

MIN_PASSWORD_LENGTH = 6

# Local event cache: entries older than the TTL are re-read, oldest dropped past the cap.
EVENT_CACHE_TTL_SECONDS = 30
EVENT_CACHE_MAX_ENTRIES = 500
