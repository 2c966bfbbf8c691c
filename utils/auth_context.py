from functools import wraps
from flask import g

from security.identity import Identity
from security.session import session_from_request
from services.errors import AuthError


def load_current_identity():
    sess, transport = session_from_request()
    g.session = sess
    g.auth_transport = transport if sess else None
    g.identity = Identity.from_user(sess.user) if sess else None


def current_identity():
    return getattr(g, "identity", None)


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if current_identity() is None:
            raise AuthError()
        return fn(*args, **kwargs)
    return wrapper
