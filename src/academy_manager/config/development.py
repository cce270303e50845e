import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "academy_db"),
}

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Event status sweep (scheduled -> in-progress -> completed)
SWEEP_ENABLED = bool(int(os.getenv("SWEEP_ENABLED", "1")))
SWEEP_INTERVAL_SECONDS = int(os.getenv("SWEEP_INTERVAL_SECONDS", "300"))

ACADEMY_NAME = os.getenv("ACADEMY_NAME", "Ηρακλής")
DEFAULT_LOCATION = os.getenv("DEFAULT_LOCATION", "Γήπεδο Ακαδημίας")
DEFAULT_EVENT_DURATION_MINUTES = int(os.getenv("DEFAULT_EVENT_DURATION_MINUTES", "90"))
TIMEZONE = os.getenv("ACADEMY_TIMEZONE", "Europe/Athens")
