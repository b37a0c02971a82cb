"""
Bumasys
Blueprint registry and shared route helpers.
"""

import logging

from flask import current_app, g, jsonify, request
from werkzeug.exceptions import HTTPException

from bumasys.core.exceptions import ServiceError, ValidationError
from bumasys.middleware.jwt_auth import login_required
from bumasys.utils.errors import E, api_error, service_error

logger = logging.getLogger(__name__)

_HTTP_CODES = {401: E.UNAUTHENTICATED, 403: E.FORBIDDEN, 404: E.NOT_FOUND}


def get_services():
    """The ``Services`` registry of the running app."""
    return current_app.extensions["bumasys"]


def json_body() -> dict:
    """Request JSON as a dict; anything else is a 400."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def caller_email() -> str | None:
    user = getattr(g, "current_user", None)
    return user.get("email") if user else None


def item_list(items: list):
    return jsonify({"items": items, "total": len(items)}), 200


def register_crud(bp, url: str, service_attr: str, entity: str, filters: tuple = (),
                  with_caller: bool = False):
    """Register list/create/get/update/delete routes for one entity service.

    GET    {url}            list, optional exact-match query filters
    POST   {url}            create → 201 (with_caller: signed-in email goes along)
    GET    {url}/<id>       one record or 404
    PUT    {url}/<id>       partial update
    DELETE {url}/<id>       {"deleted": bool}
    """
    endpoint = service_attr

    @login_required
    def list_records():
        query = {name: request.args.get(name) for name in filters}
        return item_list(getattr(get_services(), service_attr).get_all(**query))

    @login_required
    def create_record():
        service = getattr(get_services(), service_attr)
        if with_caller:
            record = service.create(json_body(), caller_email())
        else:
            record = service.create(json_body())
        return jsonify(record), 201

    @login_required
    def get_record(record_id):
        record = getattr(get_services(), service_attr).find_by_id(record_id)
        if record is None:
            return api_error(E.NOT_FOUND, f"{entity} not found")
        return jsonify(record), 200

    @login_required
    def update_record(record_id):
        data = {**json_body(), "id": record_id}
        return jsonify(getattr(get_services(), service_attr).update(data)), 200

    @login_required
    def delete_record(record_id):
        deleted = getattr(get_services(), service_attr).delete(record_id)
        return jsonify({"deleted": deleted}), 200

    bp.add_url_rule(url, f"list_{endpoint}", list_records, methods=["GET"])
    bp.add_url_rule(url, f"create_{endpoint}", create_record, methods=["POST"])
    bp.add_url_rule(f"{url}/<record_id>", f"get_{endpoint}", get_record, methods=["GET"])
    bp.add_url_rule(f"{url}/<record_id>", f"update_{endpoint}", update_record, methods=["PUT"])
    bp.add_url_rule(f"{url}/<record_id>", f"delete_{endpoint}", delete_record, methods=["DELETE"])


def register_error_handlers(app):
    """Map service exceptions and stray errors to the standard JSON shape."""

    @app.errorhandler(ServiceError)
    def _service_error(exc):
        logger.warning("Request rejected: %s", exc.message,
                       extra={"error_code": exc.code, "path": request.path})
        return service_error(exc)

    @app.errorhandler(HTTPException)
    def _http_error(exc):
        code = _HTTP_CODES.get(exc.code, E.VALIDATION_INVALID if exc.code < 500 else E.INTERNAL)
        return api_error(code, exc.description or exc.name, status=exc.code)

    @app.errorhandler(Exception)
    def _unexpected_error(exc):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return api_error(E.INTERNAL, "Internal server error")


def register_blueprints(app):
    from bumasys.blueprints.auth_bp import auth_bp
    from bumasys.blueprints.database_bp import database_bp
    from bumasys.blueprints.health_bp import health_bp
    from bumasys.blueprints.organization_bp import organization_bp
    from bumasys.blueprints.project_bp import project_bp
    from bumasys.blueprints.reference_bp import reference_bp
    from bumasys.blueprints.task_bp import task_bp
    from bumasys.blueprints.team_bp import team_bp
    from bumasys.blueprints.user_bp import user_bp

    for bp in (health_bp, auth_bp, user_bp, organization_bp, reference_bp,
               project_bp, task_bp, team_bp, database_bp):
        app.register_blueprint(bp)
