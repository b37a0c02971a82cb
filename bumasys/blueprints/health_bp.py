"""
Health check blueprint.

Endpoints:
    GET /api/v1/health         : liveness + store status
    GET /api/v1/health/config  : public view of the running configuration
"""

import logging
import os

from flask import Blueprint, current_app, jsonify

from bumasys.blueprints import get_services

logger = logging.getLogger(__name__)

health_bp = Blueprint("health_bp", __name__, url_prefix="/api/v1/health")

# Configuration keys exposed by /config; secrets are never listed here
_PUBLIC_CONFIG_KEYS = (
    "JWT_ACCESS_EXPIRES",
    "JWT_REFRESH_EXPIRES",
    "STORE_BACKEND",
    "DATA_DB_TAG",
    "AUTH_DB_FILE",
    "DEBUG",
    "TESTING",
)


@health_bp.route("", methods=["GET"])
def health():
    """Simple liveness probe reporting which data tag is active."""
    is_healthy = "bumasys" in current_app.extensions
    logger.debug("Health check completed", extra={"operation": "health"})
    return jsonify({
        "status": "ok" if is_healthy else "error",
        "store": current_app.config.get("STORE_BACKEND"),
        "tag": get_services().database.current_tag if is_healthy else None,
    }), 200 if is_healthy else 503


@health_bp.route("/config", methods=["GET"])
def public_config():
    """Configuration with secrets removed and the data dir reduced to its name."""
    body = {key.lower(): current_app.config.get(key) for key in _PUBLIC_CONFIG_KEYS}
    data_dir = current_app.config.get("DATA_DIR") or ""
    body["data_dir"] = os.path.basename(os.path.normpath(data_dir)) if data_dir else None
    return jsonify(body), 200
