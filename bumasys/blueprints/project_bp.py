"""
Project Blueprint: projects and their status reports.

Endpoints:
  Projects:              GET/POST /projects        GET/PUT/DELETE /projects/<id>
                         GET      /projects/<id>/tasks
                         GET      /projects/<id>/status-reports
  Project status report: GET/POST /project-status-reports?project_id=
                         GET/PUT/DELETE /project-status-reports/<id>
"""

from flask import Blueprint

from bumasys.blueprints import get_services, item_list, register_crud
from bumasys.middleware.jwt_auth import login_required

project_bp = Blueprint("projects", __name__, url_prefix="/api/v1")


@project_bp.route("/projects/<project_id>/tasks", methods=["GET"])
@login_required
def project_tasks(project_id):
    return item_list(get_services().projects.get_tasks(project_id))


@project_bp.route("/projects/<project_id>/status-reports", methods=["GET"])
@login_required
def project_status_reports(project_id):
    return item_list(get_services().projects.get_status_reports(project_id))


register_crud(project_bp, "/projects", "projects", "Project", filters=("lead_staff_id",))
register_crud(project_bp, "/project-status-reports", "project_status_reports",
              "Project status report", filters=("project_id",))
