"""
JWT Auth Middleware: parses the Bearer token, sets ``g.current_user``.

The hook never blocks a request by itself: an invalid or expired token just
leaves ``g.current_user`` as None. Routes that need a caller are wrapped in
``login_required``, which answers 401 when nobody is signed in.
"""

import functools
import logging

from flask import current_app, g, request

from bumasys.core.exceptions import AuthenticationError
from bumasys.utils.errors import E, api_error

logger = logging.getLogger(__name__)

# Paths that skip JWT auth entirely
JWT_SKIP_PREFIXES = (
    "/api/v1/auth/login",
    "/api/v1/auth/register",
    "/api/v1/auth/refresh",
    "/api/v1/health",
)


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    return auth_header[7:]  # Strip "Bearer "


def init_jwt_middleware(app):
    """Register JWT middleware as a before_request hook."""

    @app.before_request
    def _jwt_auth():
        g.current_user = None

        path = request.path
        if not path.startswith("/api/v1/"):
            return
        for prefix in JWT_SKIP_PREFIXES:
            if path.startswith(prefix):
                return

        token = bearer_token()
        if token is None:
            return

        auth = current_app.extensions["bumasys"].auth
        try:
            g.current_user = auth.current_user(token)
        except AuthenticationError:
            # Don't block: login_required decides per route
            logger.debug("Rejected bearer token", extra={"path": path})


def login_required(f):
    """Decorator: 401 unless the JWT middleware resolved a user."""

    @functools.wraps(f)
    def decorated(*args, **kwargs):
        if getattr(g, "current_user", None) is None:
            return api_error(E.UNAUTHENTICATED, "Not authenticated")
        return f(*args, **kwargs)

    return decorated
