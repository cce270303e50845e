import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "academy_db"),
}

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

SWEEP_ENABLED = bool(int(os.getenv("SWEEP_ENABLED", "1")))
SWEEP_INTERVAL_SECONDS = int(os.getenv("SWEEP_INTERVAL_SECONDS", "300"))

ACADEMY_NAME = os.getenv("ACADEMY_NAME", "Ηρακλής")
DEFAULT_LOCATION = os.getenv("DEFAULT_LOCATION", "Γήπεδο Ακαδημίας")
DEFAULT_EVENT_DURATION_MINUTES = int(os.getenv("DEFAULT_EVENT_DURATION_MINUTES", "90"))
TIMEZONE = os.getenv("ACADEMY_TIMEZONE", "Europe/Athens")
