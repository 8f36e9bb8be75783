from __future__ import annotations

import importlib
from pathlib import Path

import structlog
from dotenv import load_dotenv
from flask import Flask
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.envelope import domain_failure, failure
from .container import Container, build_container
from .core.constants import DEFAULT_SHIFT_ID
from .core.exceptions import DomainError
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .database.connection import DBConfig
from .logging_setup import register_request_id, setup_logging

log = structlog.get_logger(__name__)

_DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _domain_error(exc: DomainError):
        return domain_failure(exc)

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return failure(exc.description or exc.name, status=exc.code or 500)

    @app.errorhandler(Exception)
    def _unexpected(exc: Exception):
        log.exception("http.unexpected_error")
        return failure("Internal server error", status=500, error=str(exc))


def create_app(container: Container | None = None) -> Flask:
    """App factory; an injected ``container`` skips all database setup."""

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    register_request_id(app)

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        log.info("app.settings", settings=settings_module, db=DBConfig.from_mapping(db_config).describe())

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=_DATABASE_DIR / "schema.sql")
            log.info("app.schema_ready", tables=len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=_DATABASE_DIR / "seed.sql")

        container = build_container(
            db_config=db_config,
            default_shift_id=getattr(settings, "DEFAULT_SHIFT_ID", DEFAULT_SHIFT_ID),
        )

    _register_error_handlers(app)
    register_attendance(app, container)

    return app
