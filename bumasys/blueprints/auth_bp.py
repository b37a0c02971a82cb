"""
Auth Blueprint: register, login, refresh, logout, current user.

Endpoints:
  POST /api/v1/auth/register          { email, password, first_name?, last_name?, note? }
  POST /api/v1/auth/login             { email, password }
  POST /api/v1/auth/refresh           { refresh_token }
  POST /api/v1/auth/logout            { refresh_token }
  GET  /api/v1/auth/me
  POST /api/v1/auth/change-password   { old_password, new_password }

Login, register and refresh answer with
``{token, refresh_token, token_type, expires_in, user}``.
"""

from flask import Blueprint, g, jsonify

from bumasys.blueprints import get_services, json_body
from bumasys.middleware.jwt_auth import login_required
from bumasys.utils.errors import E, api_error


auth_bp = Blueprint("auth", __name__, url_prefix="/api/v1/auth")


@auth_bp.route("/register", methods=["POST"])
def register():
    data = json_body()
    return jsonify(get_services().auth.register(data)), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    data = json_body()
    email = (data.get("email") or "").strip()
    password = data.get("password") or ""
    if not email or not password:
        return api_error(E.VALIDATION_REQUIRED, "Email and password are required")
    return jsonify(get_services().auth.authenticate(email, password)), 200


@auth_bp.route("/refresh", methods=["POST"])
def refresh():
    token = json_body().get("refresh_token")
    if not token:
        return api_error(E.VALIDATION_REQUIRED, "Refresh token is required")
    return jsonify(get_services().auth.refresh_access_token(token)), 200


@auth_bp.route("/logout", methods=["POST"])
def logout():
    token = json_body().get("refresh_token")
    if not token:
        return api_error(E.VALIDATION_REQUIRED, "Refresh token is required")
    get_services().auth.logout(token)
    return jsonify({"message": "Logged out successfully"}), 200


@auth_bp.route("/me", methods=["GET"])
@login_required
def me():
    return jsonify(g.current_user), 200


@auth_bp.route("/change-password", methods=["POST"])
@login_required
def change_password():
    data = json_body()
    old_password = data.get("old_password") or ""
    new_password = data.get("new_password") or ""
    if not old_password or not new_password:
        return api_error(E.VALIDATION_REQUIRED, "Both old and new password are required")
    get_services().users.change_password(g.current_user["id"], old_password, new_password)
    return jsonify({"message": "Password changed successfully"}), 200
