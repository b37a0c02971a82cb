"""
Organization Blueprint: organizations, departments and staff.

Endpoints:
  Organizations:   GET/POST /organizations          GET/PUT/DELETE /organizations/<id>
                   GET      /organizations/stats
  Departments:     GET/POST /departments?organization_id=&parent_department_id=
                   GET/PUT/DELETE /departments/<id>
                   GET      /departments/<id>/children
  Staff:           GET/POST /staff?organization_id=&department_id=&supervisor_id=
                   GET/PUT/DELETE /staff/<id>
                   GET      /staff/<id>/subordinates

All business rules are enforced in the services; routes only translate HTTP.
"""

from flask import Blueprint, request

from bumasys.blueprints import get_services, item_list, register_crud
from bumasys.middleware.jwt_auth import login_required

organization_bp = Blueprint("organizations", __name__, url_prefix="/api/v1")


# ═════════════════════════════════════════════════════════════════════════════
# Stats & hierarchy views (registered before the CRUD <id> routes)
# ═════════════════════════════════════════════════════════════════════════════


@organization_bp.route("/organizations/stats", methods=["GET"])
@login_required
def organization_stats():
    return item_list(get_services().organizations.get_with_stats())


@organization_bp.route("/departments/stats", methods=["GET"])
@login_required
def department_stats():
    return item_list(get_services().departments.get_with_stats(
        request.args.get("organization_id")))


@organization_bp.route("/departments/<department_id>/children", methods=["GET"])
@login_required
def department_children(department_id):
    return item_list(get_services().departments.get_children(department_id))


@organization_bp.route("/staff/stats", methods=["GET"])
@login_required
def staff_stats():
    return item_list(get_services().staff.get_with_stats(
        request.args.get("organization_id"), request.args.get("department_id")))


@organization_bp.route("/staff/<staff_id>/subordinates", methods=["GET"])
@login_required
def staff_subordinates(staff_id):
    return item_list(get_services().staff.get_subordinates(staff_id))


# ═════════════════════════════════════════════════════════════════════════════
# CRUD
# ═════════════════════════════════════════════════════════════════════════════

register_crud(organization_bp, "/organizations", "organizations", "Organization")
register_crud(organization_bp, "/departments", "departments", "Department",
              filters=("organization_id", "parent_department_id"))
register_crud(organization_bp, "/staff", "staff", "Staff member",
              filters=("organization_id", "department_id", "supervisor_id"))
