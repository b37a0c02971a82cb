"""
Bumasys
Flask Application Factory.

Usage:
    from bumasys import create_app
    app = create_app()                              # defaults to "development"
    app = create_app("testing")                     # explicit config
    app = create_app("testing", store=MemoryStore())  # injected datastore
"""

import logging
import os

from flask import Flask
from flask_cors import CORS

from bumasys.blueprints import register_blueprints, register_error_handlers
from bumasys.config import config, validate_config
from bumasys.middleware.jwt_auth import init_jwt_middleware
from bumasys.middleware.logging_config import attach_store_context, configure_logging
from bumasys.middleware.timing import init_request_timing
from bumasys.services import build_services
from bumasys.store import DatabaseManager, MemoryStore

logger = logging.getLogger(__name__)


def _build_store(app):
    if app.config["STORE_BACKEND"] == "memory":
        return MemoryStore()
    return DatabaseManager(
        app.config["DATA_DIR"],
        auth_file=app.config["AUTH_DB_FILE"],
        tag=app.config["DATA_DB_TAG"],
    )


def create_app(config_name=None, store=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.
        store: Optional datastore to use instead of the one STORE_BACKEND
               selects.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__)
    app.config.from_object(config[config_name]())
    validate_config(app.config)

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)

    # ── Datastore & services ─────────────────────────────────────────────
    if store is None:
        store = _build_store(app)
    attach_store_context(store)
    services = build_services(
        store,
        jwt_secret=app.config["JWT_SECRET_KEY"],
        access_expires=app.config["JWT_ACCESS_EXPIRES"],
        refresh_expires=app.config["JWT_REFRESH_EXPIRES"],
        bcrypt_rounds=app.config["BCRYPT_ROUNDS"],
    )
    app.extensions["bumasys"] = services

    services.auth.prune_expired_sessions()

    # ── Request timing middleware ────────────────────────────────────────
    init_request_timing(app)

    # ── JWT auth middleware ──────────────────────────────────────────────
    init_jwt_middleware(app)

    # ── Error handlers & blueprints ──────────────────────────────────────
    register_error_handlers(app)
    register_blueprints(app)

    logger.info(
        "Application started",
        extra={"operation": "startup", "config_name": config_name,
               "store_backend": app.config["STORE_BACKEND"]},
    )
    return app
