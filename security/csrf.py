import secrets
from flask import request, current_app, g

from services.errors import AuthorizationError

CSRF_COOKIE = "csrf_token"
CSRF_HEADER = "X-CSRF-Token"

UNSAFE_METHODS = ("POST", "PUT", "PATCH", "DELETE")
EXEMPT_PATHS = {"/api/login", "/api/register", "/health"}


def issue_csrf_token(resp):
    token = secrets.token_urlsafe(32)
    resp.set_cookie(
        CSRF_COOKIE,
        token,
        httponly=False,  # must be readable by client JS
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
        samesite=current_app.config.get("SESSION_COOKIE_SAMESITE", "Lax"),
        path="/",
    )
    return resp


def csrf_protect():
    """Double-submit check for cookie-authenticated, state-changing requests.

    Bearer tokens are never sent by the browser on its own, so those requests
    skip the check.
    """
    if request.method not in UNSAFE_METHODS or request.path in EXEMPT_PATHS:
        return
    if getattr(g, "identity", None) is None or g.auth_transport != "cookie":
        return

    cookie_token = request.cookies.get(CSRF_COOKIE)
    header_token = request.headers.get(CSRF_HEADER)
    if not cookie_token or not header_token or not secrets.compare_digest(cookie_token, header_token):
        raise AuthorizationError("CSRF validation failed")
