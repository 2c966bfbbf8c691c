from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Identity:
    """Who is calling. Built from a User row, never carries the hash."""

    id: str
    email: str
    role: str
    verified_status: bool
    first_name: str
    last_name: Optional[str] = None
    school_id: Optional[str] = None

    @classmethod
    def from_user(cls, user) -> "Identity":
        return cls(
            id=user.id,
            email=user.email,
            role=user.role,
            verified_status=bool(user.verified_status),
            first_name=user.first_name,
            last_name=user.last_name,
            school_id=user.school_id,
        )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
