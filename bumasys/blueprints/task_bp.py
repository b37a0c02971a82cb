"""
Task Blueprint: tasks, assignees, predecessors and task-level reporting.

Endpoints:
  Tasks:          GET/POST /tasks?project_id=&parent_task_id=
                  GET/PUT/DELETE /tasks/<id>
                  GET      /tasks/<id>/children
  Assignees:      GET      /tasks/<id>/assignees
                  POST     /tasks/<id>/assignees                  { staff_id }
                  DELETE   /tasks/<id>/assignees/<staff_id>
  Predecessors:   GET      /tasks/<id>/predecessors
                  POST     /tasks/<id>/predecessors               { predecessor_task_id }
                  DELETE   /tasks/<id>/predecessors/<pred_id>
  Progress:       GET/POST /task-progress?task_id=                GET/PUT/DELETE /task-progress/<id>
  Status reports: GET/POST /task-status-reports?task_id=          GET/PUT/DELETE /task-status-reports/<id>
  Evaluations:    GET/POST /task-evaluations?task_id=             GET/PUT/DELETE /task-evaluations/<id>

Progress and status reports without a creator_id are attributed to the
signed-in caller when the caller is a staff member on the task.
"""

from flask import Blueprint, jsonify

from bumasys.blueprints import get_services, item_list, json_body, register_crud
from bumasys.core.exceptions import ValidationError
from bumasys.middleware.jwt_auth import login_required

task_bp = Blueprint("tasks", __name__, url_prefix="/api/v1")


def _required_field(data: dict, field: str):
    value = data.get(field)
    if not value:
        raise ValidationError(f"{field} is required", details={field: "required"})
    return value


# ═════════════════════════════════════════════════════════════════════════════
# Hierarchy
# ═════════════════════════════════════════════════════════════════════════════


@task_bp.route("/tasks/<task_id>/children", methods=["GET"])
@login_required
def task_children(task_id):
    return item_list(get_services().tasks.get_children(task_id))


# ═════════════════════════════════════════════════════════════════════════════
# Assignees
# ═════════════════════════════════════════════════════════════════════════════


@task_bp.route("/tasks/<task_id>/assignees", methods=["GET"])
@login_required
def list_assignees(task_id):
    return item_list(get_services().tasks.get_assignees(task_id))


@task_bp.route("/tasks/<task_id>/assignees", methods=["POST"])
@login_required
def assign_staff(task_id):
    staff_id = _required_field(json_body(), "staff_id")
    return jsonify(get_services().tasks.assign_staff(task_id, staff_id)), 201


@task_bp.route("/tasks/<task_id>/assignees/<staff_id>", methods=["DELETE"])
@login_required
def remove_staff(task_id, staff_id):
    return jsonify({"deleted": get_services().tasks.remove_staff(task_id, staff_id)}), 200


# ═════════════════════════════════════════════════════════════════════════════
# Predecessors
# ═════════════════════════════════════════════════════════════════════════════


@task_bp.route("/tasks/<task_id>/predecessors", methods=["GET"])
@login_required
def list_predecessors(task_id):
    return item_list(get_services().tasks.get_predecessors(task_id))


@task_bp.route("/tasks/<task_id>/predecessors", methods=["POST"])
@login_required
def add_predecessor(task_id):
    predecessor_id = _required_field(json_body(), "predecessor_task_id")
    return jsonify(get_services().tasks.add_predecessor(task_id, predecessor_id)), 201


@task_bp.route("/tasks/<task_id>/predecessors/<predecessor_id>", methods=["DELETE"])
@login_required
def remove_predecessor(task_id, predecessor_id):
    deleted = get_services().tasks.remove_predecessor(task_id, predecessor_id)
    return jsonify({"deleted": deleted}), 200


# ═════════════════════════════════════════════════════════════════════════════
# CRUD
# ═════════════════════════════════════════════════════════════════════════════

register_crud(task_bp, "/tasks", "tasks", "Task", filters=("project_id", "parent_task_id"))
register_crud(task_bp, "/task-progress", "task_progress", "Task progress report",
              filters=("task_id",), with_caller=True)
register_crud(task_bp, "/task-status-reports", "task_status_reports", "Task status report",
              filters=("task_id",), with_caller=True)
register_crud(task_bp, "/task-evaluations", "task_evaluations", "Task evaluation",
              filters=("task_id",))
