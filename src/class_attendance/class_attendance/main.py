from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .database.bootstrap import apply_schema, apply_seed_sql, list_tables

from .container import Container, build_container
from .analytics.controller import register as register_analytics
from .attendance.controller import register as register_attendance
from .biometrics.controller import register as register_biometrics
from .common.errors import register_error_handlers
from .sessions.controller import register as register_sessions

logger = logging.getLogger(__name__)

SQL_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app(container: Optional[Container] = None, *, settings: Any = None) -> Flask:
    """Build the Flask app.

    Without an injected container the MySQL-backed one is built from the
    settings module selected by APP_ENV, applying schema/seed first when
    AUTO_INIT_DB / AUTO_SEED_DB are set.
    """

    load_dotenv(override=False)
    settings_module = get_settings_module()
    if settings is None:
        settings = importlib.import_module(settings_module)

    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    if container is None:
        db_config = dict(getattr(settings, "DB_CONFIG"))
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SQL_DIR / "schema.sql")
            logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=SQL_DIR / "seed.sql")
            logger.info("Demo seed ready")

        container = build_container(db_config=db_config, settings=settings)

    app.extensions["class_attendance"] = container

    register_error_handlers(app)
    register_sessions(app, container)
    register_attendance(app, container)
    register_biometrics(app, container)
    register_analytics(app, container)

    return app
