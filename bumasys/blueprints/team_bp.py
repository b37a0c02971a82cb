"""
Team Blueprint: teams and their membership.

Endpoints:
  Teams:     GET/POST /teams?lead_id=      GET/PUT/DELETE /teams/<id>
             GET      /teams/stats
  Members:   GET      /teams/<id>/members
             POST     /teams/<id>/members              { staff_id, member_role? }
             DELETE   /teams/<id>/members/<staff_id>
             GET/PUT/DELETE /team-members/<member_id>
             GET      /staff/<staff_id>/teams
"""

from flask import Blueprint, jsonify

from bumasys.blueprints import get_services, item_list, json_body, register_crud
from bumasys.middleware.jwt_auth import login_required
from bumasys.utils.errors import E, api_error

team_bp = Blueprint("teams", __name__, url_prefix="/api/v1")


@team_bp.route("/teams/stats", methods=["GET"])
@login_required
def team_stats():
    return item_list(get_services().teams.get_with_stats())


# ── Membership ───────────────────────────────────────────────────────────


@team_bp.route("/teams/<team_id>/members", methods=["GET"])
@login_required
def list_members(team_id):
    return item_list(get_services().teams.get_members(team_id))


@team_bp.route("/teams/<team_id>/members", methods=["POST"])
@login_required
def add_member(team_id):
    data = {**json_body(), "team_id": team_id}
    return jsonify(get_services().teams.add_member(data)), 201


@team_bp.route("/teams/<team_id>/members/<staff_id>", methods=["DELETE"])
@login_required
def remove_staff_from_team(team_id, staff_id):
    deleted = get_services().teams.remove_staff_from_team(team_id, staff_id)
    return jsonify({"deleted": deleted}), 200


@team_bp.route("/team-members/<member_id>", methods=["GET"])
@login_required
def get_member(member_id):
    member = get_services().teams.find_member_by_id(member_id)
    if member is None:
        return api_error(E.NOT_FOUND, "Team member not found")
    return jsonify(member), 200


@team_bp.route("/team-members/<member_id>", methods=["PUT"])
@login_required
def update_member(member_id):
    data = {**json_body(), "id": member_id}
    return jsonify(get_services().teams.update_member(data)), 200


@team_bp.route("/team-members/<member_id>", methods=["DELETE"])
@login_required
def remove_member(member_id):
    return jsonify({"deleted": get_services().teams.remove_member(member_id)}), 200


@team_bp.route("/staff/<staff_id>/teams", methods=["GET"])
@login_required
def staff_teams(staff_id):
    return item_list(get_services().teams.get_staff_teams(staff_id))


register_crud(team_bp, "/teams", "teams", "Team", filters=("lead_id",))
