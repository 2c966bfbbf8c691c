"""Registration and password authentication against the credential store."""
import secrets
from typing import Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from models.user import User
from security.identity import Identity
from security.password import hash_password, verify_password
from services.errors import AuthorizationError, DuplicateEmail, InvalidCredentials, ValidationError
from services.store import EntityStore
from utils.audit import log_event

# bcrypt only reads the first 72 bytes and newer releases refuse longer input
MAX_PASSWORD_BYTES = 72


def normalize_email(value: str) -> str:
    return (value or "").strip().lower()


def _check_password_policy(password: str):
    min_len = int(current_app.config.get("PASSWORD_MIN_LEN", 8))
    if len(password) < min_len:
        raise ValidationError(
            "Password does not meet policy",
            details=[f"Password must be at least {min_len} characters"],
        )
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(
            "Password does not meet policy",
            details=[f"Password must be at most {MAX_PASSWORD_BYTES} bytes"],
        )


def _check_admin_code(supplied: Optional[str]):
    expected = current_app.config.get("ADMIN_SIGNUP_CODE")
    if not expected or not supplied or not secrets.compare_digest(expected, supplied):
        raise AuthorizationError("Admin signup is not allowed")


def register(
    store: EntityStore,
    email: str,
    password: str,
    first_name: str,
    role: str = "student",
    last_name: Optional[str] = None,
    school_id: Optional[str] = None,
    business_reg_number: Optional[str] = None,
    admin_code: Optional[str] = None,
) -> Identity:
    email = normalize_email(email)
    _check_password_policy(password)
    if role == "admin":
        _check_admin_code(admin_code)

    if school_id and store.get_school(school_id) is None:
        raise ValidationError("Unknown school", details={"schoolId": school_id})

    if store.get_user_by_email(email):
        log_event("REGISTER_FAIL_EMAIL_EXISTS", metadata={"email": email})
        raise DuplicateEmail()

    user = store.add(User(
        email=email,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        role=role,
        school_id=school_id,
        business_reg_number=business_reg_number if role == "agent" else None,
        verified_status=False,
    ))
    try:
        store.commit()
    except IntegrityError:
        # a concurrent registration took the email between lookup and insert
        store.rollback()
        log_event("REGISTER_FAIL_EMAIL_EXISTS", metadata={"email": email})
        raise DuplicateEmail()

    log_event("REGISTER_SUCCESS", user_id=user.id, metadata={"role": role})
    return Identity.from_user(user)


def authenticate(store: EntityStore, email: str, password: str) -> Identity:
    """Unknown email and wrong password fail the same way, in about the same time."""
    email = normalize_email(email)
    if not email or not password:
        raise InvalidCredentials()

    user = store.get_user_by_email(email)
    if not verify_password(password, user.password_hash if user else None) or user is None:
        log_event(
            "LOGIN_FAIL",
            user_id=user.id if user else None,
            metadata={"email": email, "known_email": user is not None},
        )
        raise InvalidCredentials()

    return Identity.from_user(user)
