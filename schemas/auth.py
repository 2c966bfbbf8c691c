from typing import Annotated, Literal, Optional

from pydantic import AfterValidator, ConfigDict, Field

from schemas import RequestSchema


def _check_email(value: str) -> str:
    value = value.strip().lower()
    local, _, domain = value.partition("@")
    if not local or "." not in domain or len(value) > 255:
        raise ValueError("Invalid email")
    return value


Email = Annotated[str, AfterValidator(_check_email)]


class RegisterRequest(RequestSchema):
    email: Email
    password: str = Field(min_length=1, max_length=128)
    first_name: str = Field(min_length=1, max_length=120)
    last_name: Optional[str] = Field(default=None, max_length=120)
    role: Literal["student", "agent", "admin"] = "student"
    school_id: Optional[str] = None
    business_reg_number: Optional[str] = Field(default=None, max_length=64)
    admin_code: Optional[str] = None


class LoginRequest(RequestSchema):
    model_config = ConfigDict(extra="ignore")

    # not validated beyond presence: a malformed email is just a failed login
    email: str = ""
    password: str = ""
