"""Startup validation and bootstrap helpers."""

from __future__ import annotations

import logging

from leadtracker.core.config import get_config
from leadtracker.core.dependencies import LeadTrackerApp, build_application
from leadtracker.core.logging_config import configure_logging
from leadtracker.database.db import verify_database_connection

logger = logging.getLogger(__name__)


def validate_startup(app: LeadTrackerApp) -> None:
    """Fail-fast connectivity check for the configured database."""
    if app.engine is not None and not verify_database_connection(app.engine):
        raise RuntimeError("Database connectivity check failed.")

    logger.info(
        "startup.config.validated",
        extra={
            "event": "startup.config.validated",
            "env": app.config.ENV,
            "database_url_scheme": app.config.DATABASE_URL.split("://", 1)[0],
            "leads": len(app.store),
        },
    )


def bootstrap() -> LeadTrackerApp:
    """Initialize logging, build the application and validate it."""
    configure_logging()
    app = build_application(get_config())
    validate_startup(app)
    return app
