"""Opaque session tokens.

One mechanism carries the caller's identity: a random token whose sha256 is
stored server-side. Clients present it either in the auth cookie or as an
``Authorization: Bearer`` header; both paths resolve through
``session_from_request``.
"""
import hashlib
import secrets
from datetime import datetime, timedelta
from typing import Optional, Tuple

from flask import request, current_app

from models import db
from models.session import AuthSession

BEARER_PREFIX = "bearer "


def _hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def create_session(user_id: str) -> str:
    """
    Creates a server-side session and returns the RAW token.
    Only the hash is stored.
    """
    raw_token = secrets.token_urlsafe(32)

    lifetime = current_app.config.get("SESSION_LIFETIME_SECONDS", 7 * 24 * 60 * 60)
    now = datetime.utcnow()

    row = AuthSession(
        user_id=user_id,
        token_hash=_hash_token(raw_token),
        created_at=now,
        last_seen_at=now,
        expires_at=now + timedelta(seconds=lifetime),
        ip=request.headers.get("X-Forwarded-For", request.remote_addr),
        user_agent=(request.headers.get("User-Agent") or "")[:255],
    )
    db.session.add(row)
    db.session.commit()
    return raw_token


def token_from_request() -> Tuple[Optional[str], Optional[str]]:
    """Returns (raw_token, transport) where transport is "bearer" or "cookie"."""
    header = request.headers.get("Authorization") or ""
    if header.lower().startswith(BEARER_PREFIX):
        token = header[len(BEARER_PREFIX):].strip()
        if token:
            return token, "bearer"

    cookie_name = current_app.config.get("AUTH_COOKIE_NAME", "hostelhub_session")
    token = request.cookies.get(cookie_name)
    if token:
        return token, "cookie"
    return None, None


def resolve_session(raw_token: Optional[str]) -> Optional[AuthSession]:
    if not raw_token:
        return None

    sess = AuthSession.query.filter_by(token_hash=_hash_token(raw_token)).first()
    if not sess:
        return None

    now = datetime.utcnow()
    idle_seconds = current_app.config.get("IDLE_TIMEOUT_SECONDS", 24 * 60 * 60)
    if not sess.is_live(now, idle_seconds):
        return None

    sess.last_seen_at = now
    db.session.commit()
    return sess


def session_from_request():
    raw_token, transport = token_from_request()
    return resolve_session(raw_token), transport


def revoke_session(raw_token: str) -> bool:
    if not raw_token:
        return False
    sess = AuthSession.query.filter_by(token_hash=_hash_token(raw_token)).first()
    if not sess or sess.revoked_at is not None:
        return False
    sess.revoked_at = datetime.utcnow()
    db.session.commit()
    return True


def revoke_all_sessions(user_id: str) -> int:
    now = datetime.utcnow()
    sessions = AuthSession.query.filter_by(user_id=user_id, revoked_at=None).all()
    for s in sessions:
        s.revoked_at = now
    db.session.commit()
    return len(sessions)
