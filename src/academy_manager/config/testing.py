import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "academy_test_db"),
}

DEBUG = False
TESTING = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

# Tests drive the sweep by hand with a fixed clock.
SWEEP_ENABLED = False
SWEEP_INTERVAL_SECONDS = 300

ACADEMY_NAME = "Ηρακλής"
DEFAULT_LOCATION = "Γήπεδο Ακαδημίας"
DEFAULT_EVENT_DURATION_MINUTES = 90
TIMEZONE = "Europe/Athens"
