"""
Database Blueprint: data tag selection, backups and collection counts.

Endpoints:
  GET  /api/v1/database/tag       current data tag
  POST /api/v1/database/tag       { tag } → switch the business-data file
  POST /api/v1/database/backup    write a backup, answer with its relative path
  GET  /api/v1/database/stats     record count per collection
"""

from flask import Blueprint, jsonify

from bumasys.blueprints import get_services, json_body
from bumasys.middleware.jwt_auth import login_required


database_bp = Blueprint("database", __name__, url_prefix="/api/v1/database")


@database_bp.route("/tag", methods=["GET"])
@login_required
def current_tag():
    return jsonify({"tag": get_services().database.current_tag}), 200


@database_bp.route("/tag", methods=["POST"])
@login_required
def switch_tag():
    tag = get_services().database.switch_tag(json_body().get("tag"))
    return jsonify({"tag": tag}), 200


@database_bp.route("/backup", methods=["POST"])
@login_required
def create_backup():
    path = get_services().database.create_backup()
    return jsonify({"path": path}), 201


@database_bp.route("/stats", methods=["GET"])
@login_required
def stats():
    return jsonify(get_services().database.stats()), 200
