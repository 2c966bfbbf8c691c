from dataclasses import dataclass
from functools import wraps
from typing import Iterable, Optional

from flask import g

from services.errors import AuthError, AuthorizationError

UNAUTHENTICATED = "Unauthenticated"
INSUFFICIENT_ROLE = "InsufficientRole"
NOT_OWNER = "NotOwner"

_MESSAGES = {
    UNAUTHENTICATED: "Authentication required",
    INSUFFICIENT_ROLE: "Insufficient permissions",
    NOT_OWNER: "Not authorized",
}


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[str] = None

    def raise_for_denial(self, message: Optional[str] = None):
        if self.allowed:
            return
        if self.reason == UNAUTHENTICATED:
            raise AuthError(message or _MESSAGES[UNAUTHENTICATED])
        raise AuthorizationError(message or _MESSAGES[self.reason], details={"reason": self.reason})


ALLOW = Decision(True)


def authorize(identity, required_roles: Iterable[str], resource_owner_id: Optional[str] = None) -> Decision:
    """Pure role/ownership check. Admins pass any ownership check they reach."""
    if identity is None:
        return Decision(False, UNAUTHENTICATED)
    if identity.role not in set(required_roles):
        return Decision(False, INSUFFICIENT_ROLE)
    if resource_owner_id is not None and identity.id != resource_owner_id and identity.role != "admin":
        return Decision(False, NOT_OWNER)
    return ALLOW


def require_roles(*role_names: str):
    """
    Usage: @require_roles("admin")
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            authorize(getattr(g, "identity", None), role_names).raise_for_denial()
            return fn(*args, **kwargs)
        return wrapper
    return decorator
