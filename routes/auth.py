from flask import Blueprint, jsonify, current_app, g

from schemas import parse_body
from schemas.auth import LoginRequest, RegisterRequest
from security.csrf import issue_csrf_token
from security.session import create_session, revoke_all_sessions, revoke_session, token_from_request
from services import authenticator
from services.store import get_store
from utils.audit import log_event
from utils.auth_context import login_required
from utils.serializers import user_to_dict

auth_bp = Blueprint("auth", __name__, url_prefix="/api")


def _cookie_name() -> str:
    return current_app.config.get("AUTH_COOKIE_NAME", "hostelhub_session")


def _session_response(message: str, user, raw_token: str, status: int):
    resp = jsonify(message=message, user=user_to_dict(user), token=raw_token)
    resp.set_cookie(
        _cookie_name(),
        raw_token,
        httponly=True,
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
        samesite=current_app.config.get("SESSION_COOKIE_SAMESITE", "Lax"),
        max_age=current_app.config.get("SESSION_LIFETIME_SECONDS", 7 * 24 * 60 * 60),
        path="/",
    )
    issue_csrf_token(resp)
    return resp, status


@auth_bp.post("/register")
def register():
    data = parse_body(RegisterRequest)
    store = get_store()

    identity = authenticator.register(
        store,
        email=data.email,
        password=data.password,
        first_name=data.first_name,
        last_name=data.last_name,
        role=data.role,
        school_id=data.school_id,
        business_reg_number=data.business_reg_number,
        admin_code=data.admin_code,
    )

    # a new account starts signed in
    raw_token = create_session(identity.id)
    return _session_response("Registration successful", store.get_user(identity.id), raw_token, 201)


@auth_bp.post("/login")
def login():
    data = parse_body(LoginRequest)
    store = get_store()

    identity = authenticator.authenticate(store, data.email, data.password)

    # Rotate: revoke any existing sessions for this user
    revoked_count = revoke_all_sessions(identity.id)
    raw_token = create_session(identity.id)

    log_event("LOGIN_SUCCESS", user_id=identity.id, metadata={"revoked_sessions": revoked_count})
    return _session_response("Login successful", store.get_user(identity.id), raw_token, 200)


@auth_bp.get("/auth/user")
@auth_bp.get("/user")
@login_required
def me():
    return jsonify(user=user_to_dict(get_store().get_user(g.identity.id))), 200


@auth_bp.post("/logout")
@login_required
def logout():
    raw_token, _ = token_from_request()
    revoke_session(raw_token)
    log_event("LOGOUT", user_id=g.identity.id)

    resp = jsonify(message="Logout successful")
    resp.delete_cookie(_cookie_name(), path="/")
    return resp, 200
