from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.web import register_error_handlers
from .container import build_container
from .core.constants import DEFAULT_QUERY_TIMEOUT_SECONDS, READ_CHUNK_SIZE
from .logging_config import configure_logging
from .access.controller import register as register_access
from .attendance.controller import register as register_attendance
from .enrollment.controller import register as register_enrollment
from .meetings.controller import register as register_meetings

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    configure_logging(getattr(settings, "LOG_LEVEL", None), log_dir=getattr(settings, "LOG_DIR", None))
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    container = build_container(
        db_config=db_config,
        query_timeout=float(getattr(settings, "QUERY_TIMEOUT_SECONDS", DEFAULT_QUERY_TIMEOUT_SECONDS)),
        chunk_size=int(getattr(settings, "READ_CHUNK_SIZE", READ_CHUNK_SIZE)),
    )

    register_error_handlers(app)
    register_access(app, container)
    register_attendance(app, container)
    register_enrollment(app, container)
    register_meetings(app, container)

    return app
