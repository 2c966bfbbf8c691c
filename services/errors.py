"""Error taxonomy shared by the services and the HTTP layer.

Every error carries the status code the API answers with. The app-level
handler in ``app.py`` renders them as ``{"error": message, "details": ...}``.
"""


class ApiError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message=None, details=None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(ApiError):
    status_code = 400
    default_message = "Invalid data"


class AuthError(ApiError):
    status_code = 401
    default_message = "Authentication required"


class InvalidCredentials(AuthError):
    # one message for unknown email and bad password alike
    default_message = "Invalid email or password"


class AuthorizationError(ApiError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Not found"


class ConflictError(ApiError):
    status_code = 409
    default_message = "Conflict"


class DuplicateEmail(ConflictError):
    default_message = "User with this email already exists"


class IllegalTransition(ConflictError):
    def __init__(self, current: str, requested: str):
        super().__init__(
            f"Cannot move booking from {current} to {requested}",
            details={"current": current, "requested": requested},
        )
        self.current = current
        self.requested = requested
