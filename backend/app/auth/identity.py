# app/auth/identity.py
"""
Canonical authenticated identity model.

Downstream code (policy, services) reasons about "who is this user?" through
this object rather than the ORM row or raw token claims. It is INTERNAL ONLY
and is never returned to clients.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from app.models.enums import Role

if TYPE_CHECKING:
    from app.models.user import User


@dataclass(frozen=True)
class Identity:
    """
    Resolved principal attached to each request.

    Attributes:
        id: Internal user id (``users.id``). This is the ownership axis.
        email: Normalised (lowercased) email.
        role: Closed role enum; never a raw string.
    """

    id: int
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @property
    def is_dentist(self) -> bool:
        return self.role is Role.DENTIST

    @classmethod
    def from_user(cls, user: User) -> Identity:
        role = Role.parse(user.role)
        if role is None:
            raise ValueError(f"User {user.id} has unknown role {user.role!r}")
        return cls(id=int(user.id), email=str(user.email), role=role)

    def to_debug_dict(self) -> dict[str, Any]:
        return {"id": self.id, "email": self.email, "role": self.role.value}
