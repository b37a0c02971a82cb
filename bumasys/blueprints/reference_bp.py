"""
Reference Data Blueprint: task statuses, priorities and complexities.

Endpoints (same shape for each kind):
  GET/POST         /api/v1/statuses        /api/v1/priorities        /api/v1/complexities
  GET/PUT/DELETE   /api/v1/statuses/<id>   /api/v1/priorities/<id>   /api/v1/complexities/<id>
"""

from flask import Blueprint

from bumasys.blueprints import register_crud

reference_bp = Blueprint("reference_data", __name__, url_prefix="/api/v1")

register_crud(reference_bp, "/statuses", "statuses", "Status")
register_crud(reference_bp, "/priorities", "priorities", "Priority")
register_crud(reference_bp, "/complexities", "complexities", "Complexity")
