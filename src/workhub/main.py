from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .chat.controller import register as register_chat
from .common.http import register_error_handlers
from .config import get_settings_module
from .container import Container, build_container
from .core.constants import DEFAULT_KEEPALIVE_SECONDS, DEFAULT_SESSION_DAYS
from .core.log import configure_logging
from .database.bootstrap import apply_schema, ensure_demo_data, list_tables
from .health.controller import register as register_health
from .invitations.controller import register as register_invitations
from .leaves.controller import register as register_leaves
from .manuals.controller import register as register_manuals
from .meetings.controller import register as register_meetings
from .organizations.controller import register as register_organizations
from .tasks.controller import register as register_tasks
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    When ``container`` is given (tests), database bootstrap is skipped and the
    supplied services are used as-is.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["SESSION_DAYS"] = int(getattr(settings, "SESSION_DAYS", DEFAULT_SESSION_DAYS))
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(days=app.config["SESSION_DAYS"])
    app.config["APP_BASE_URL"] = str(getattr(settings, "APP_BASE_URL", "http://localhost:5000")).rstrip("/")
    app.config["CHAT_KEEPALIVE_SECONDS"] = float(getattr(settings, "CHAT_KEEPALIVE_SECONDS", DEFAULT_KEEPALIVE_SECONDS))

    configure_logging(str(getattr(settings, "LOG_LEVEL", "INFO")))
    logger.debug(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_data(db_config)
        container = build_container(db_config=db_config, settings=settings)

    app.extensions["workhub"] = container
    register_error_handlers(app)

    register_health(app, container)
    register_users(app, container)
    register_organizations(app, container)
    register_invitations(app, container)
    register_tasks(app, container)
    register_chat(app, container)
    register_manuals(app, container)
    register_meetings(app, container)
    register_attendance(app, container)
    register_leaves(app, container)

    return app
