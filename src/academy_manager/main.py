from __future__ import annotations

import importlib
import threading
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .common.web import register_error_handlers
from .config import get_settings_module
from .container import Container, build_container
from .dashboard.controller import register as register_dashboard
from .database.bootstrap import apply_schema, list_tables
from .events.controller import register as register_events
from .events.formatting import EventFormatter
from .players.controller import register as register_players
from .sweep.controller import register as register_sweep
from .sweep.scheduler import SweepScheduler
from .teams.controller import register as register_teams
from .users.controller import register as register_users

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    A ready ``container`` (e.g. built on in-memory repositories) skips the
    database setup entirely.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.json.ensure_ascii = False

    register_error_handlers(app)

    if container is None:
        app.logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            app.logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

        formatter = EventFormatter(
            academy_name=getattr(settings, "ACADEMY_NAME"),
            default_location=getattr(settings, "DEFAULT_LOCATION"),
            default_duration_minutes=int(getattr(settings, "DEFAULT_EVENT_DURATION_MINUTES")),
            timezone_name=getattr(settings, "TIMEZONE"),
        )
        container = build_container(db_config=db_config, formatter=formatter)

    app.extensions["container"] = container

    register_users(app, container)
    register_teams(app, container)
    register_players(app, container)
    register_events(app, container)
    register_attendance(app, container)
    register_dashboard(app, container)
    register_sweep(app, container)

    if bool(getattr(settings, "SWEEP_ENABLED", False)):
        _install_sweep_scheduler(app, container, int(getattr(settings, "SWEEP_INTERVAL_SECONDS")))

    return app


def _install_sweep_scheduler(app: Flask, container: Container, interval_seconds: int) -> SweepScheduler:
    """Run the periodic sweep in this process, starting with the first request it serves.

    CLI commands such as ``flask sweep-events`` serve no requests, so they never
    start a second sweeper next to their own run. Enable ``SWEEP_ENABLED`` on a
    single serving process per deployment.
    """
    scheduler = SweepScheduler(container.sweeper, interval_seconds)
    app.extensions["sweep_scheduler"] = scheduler
    lock = threading.Lock()

    @app.before_request
    def _start_sweep_scheduler():
        if scheduler.running:
            return
        with lock:
            scheduler.start()

    return scheduler
