from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: user profile.

    Plain data object, holds no database access code.
    """

    user_id: str
    name: str
    email: str
    password_hash: str
    role: Role
    created_at: Optional[datetime] = None

    def to_public_dict(self) -> dict:
        return {"id": self.user_id, "name": self.name, "email": self.email, "role": self.role.value}


@dataclass(frozen=True)
class SessionUser:
    """The authenticated caller, passed explicitly into every service call."""

    user_id: str
    name: str
    email: str
    role: Role

    @property
    def is_parent(self) -> bool:
        return self.role == Role.PARENT

    @property
    def is_coach(self) -> bool:
        return self.role == Role.COACH

    @property
    def is_superadmin(self) -> bool:
        return self.role == Role.SUPERADMIN

    def to_dict(self) -> dict:
        return {"id": self.user_id, "name": self.name, "email": self.email, "role": self.role.value}
