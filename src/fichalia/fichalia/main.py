from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .common.logging_setup import configure_logging
from .container import Container, build_container
from .core.constants import APP_NAME, DEFAULT_TIMEZONE
from .core.exceptions import AuthenticationError, AuthorizationError, DomainError, NotFoundError
from .database.bootstrap import apply_schema, ensure_admin, list_tables
from .profiles.controller import register as register_profiles
from .time_entries.controller import register as register_time_entries

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_app(*, container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.json.ensure_ascii = False

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_DIR", None))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "%s starting: settings=%s db=%s@%s:%s/%s",
            APP_NAME,
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
            admin_email = getattr(settings, "ADMIN_EMAIL", None)
            admin_password = getattr(settings, "ADMIN_PASSWORD", None)
            if admin_email and admin_password:
                ensure_admin(db_config, email=admin_email, password=admin_password)

        container = build_container(
            db_config=db_config,
            timezone_name=getattr(settings, "TIMEZONE", DEFAULT_TIMEZONE),
        )

    app.extensions["fichalia"] = container

    register_profiles(app, container)
    register_time_entries(app, container)

    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        code = 400
        if isinstance(e, NotFoundError):
            code = 404
        elif isinstance(e, AuthenticationError):
            code = 401
        elif isinstance(e, AuthorizationError):
            code = 403
        return jsonify({"success": False, "message": str(e)}), code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        if isinstance(e, HTTPException):
            return jsonify({"success": False, "message": e.description}), e.code
        logger.exception("Unhandled error")
        return jsonify({"success": False, "message": "Error interno del servidor"}), 500

    return app
