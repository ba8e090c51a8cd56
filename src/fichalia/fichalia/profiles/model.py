from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Profile:
    """Domain entity: an employee or admin account.

    Plain data object (no DB access code).
    """

    id: str
    email: str
    full_name: str
    role: Role
    active: bool = True
    password_hash: str = ""
    created_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


@dataclass(frozen=True)
class CurrentUser:
    """Auth state for the signed-in user, kept in the Flask session."""

    user_id: str
    email: str
    full_name: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def to_session(self) -> dict:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "name": self.full_name,
            "role": self.role.value,
        }

    @classmethod
    def from_session(cls, data) -> Optional["CurrentUser"]:
        if not data or "user_id" not in data:
            return None
        try:
            role = Role(data.get("role", Role.EMPLOYEE.value))
        except ValueError:
            return None
        return cls(
            user_id=str(data["user_id"]),
            email=str(data.get("email", "")),
            full_name=str(data.get("name", "")),
            role=role,
        )
