"""
User Blueprint: admin CRUD over login identities.

Endpoints:
  GET/POST         /api/v1/users
  GET/PUT/DELETE   /api/v1/users/<id>

Password hashes are never part of a response.
"""

from flask import Blueprint

from bumasys.blueprints import register_crud

user_bp = Blueprint("users", __name__, url_prefix="/api/v1")

register_crud(user_bp, "/users", "users", "User")
