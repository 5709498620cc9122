from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import build_container
from .core.constants import DEFAULT_CACHE_MAX_ENTRIES, DEFAULT_CACHE_TTL_SECONDS
from .database.bootstrap import apply_schema, list_tables
from .logging_utils import setup_logging

logger = logging.getLogger(__name__)


def create_app(container=None) -> Flask:
    """App factory. Pass ``container`` to skip building the MySQL wiring."""

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            absence_threshold=int(getattr(settings, "ABSENCE_ALERT_THRESHOLD", 3)),
            roster_window=int(getattr(settings, "ROSTER_WINDOW_SCHEDULES", 10)),
            cache_ttl=getattr(settings, "RECORD_CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL_SECONDS),
            cache_max_entries=int(getattr(settings, "RECORD_CACHE_MAX_ENTRIES", DEFAULT_CACHE_MAX_ENTRIES)),
        )

    register_attendance(app, container)
    return app
