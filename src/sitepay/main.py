from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .api.error_handlers import register_error_handlers
from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .logging_config import configure_logging
from .payments.controller import register as register_payments
from .settings import get_settings_module

logger = logging.getLogger(__name__)


def create_app(*, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["DEFAULT_PAGE_SIZE"] = int(getattr(settings, "DEFAULT_PAGE_SIZE", 10))
    app.config["MAX_PAGE_SIZE"] = int(getattr(settings, "MAX_PAGE_SIZE", 100))

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    logger.info(
        "app_configured",
        extra={
            "settings": settings_module,
            "db": f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
        },
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("schema_ready", extra={"tables": len(list_tables(db_config))})
        container = build_container(db_config=db_config)

    register_attendance(app, container)
    register_payments(app, container)
    register_error_handlers(app)

    return app
