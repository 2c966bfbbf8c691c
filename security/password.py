import bcrypt
from flask import current_app, has_app_context

DEFAULT_ROUNDS = 12

# Compared against when the email is unknown so a miss costs one bcrypt check too.
_DUMMY_HASH = bcrypt.hashpw(b"hostelhub-timing-equalizer", bcrypt.gensalt(rounds=4)).decode("utf-8")


def _rounds() -> int:
    if has_app_context():
        return int(current_app.config.get("BCRYPT_ROUNDS", DEFAULT_ROUNDS))
    return DEFAULT_ROUNDS


def hash_password(plain_password: str) -> str:
    if not isinstance(plain_password, str) or len(plain_password) == 0:
        raise ValueError("Password must be a non-empty string")

    salt = bcrypt.gensalt(rounds=_rounds())
    return bcrypt.hashpw(plain_password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, password_hash) -> bool:
    """Constant-time check. A missing hash still burns one comparison."""
    if not plain_password:
        return False
    candidate = (password_hash or _DUMMY_HASH).encode("utf-8")
    try:
        matched = bcrypt.checkpw(plain_password.encode("utf-8"), candidate)
    except ValueError:
        # malformed stored hash
        return False
    return matched and password_hash is not None
