# app/core/caller.py
# Explicit caller identity threaded through every service call.
# Built from the bearer token in app/core/dependencies.py, or directly in
# tests / webhooks (Caller.system()).

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

ROLES = ("student", "teacher", "admin", "system", "anonymous")


@dataclass(frozen=True)
class Caller:
    id: Optional[UUID]
    role: str

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Unknown caller role '{self.role}'")

    @classmethod
    def anonymous(cls) -> "Caller":
        return cls(id=None, role="anonymous")

    @classmethod
    def system(cls) -> "Caller":
        """The payment collaborator and other trusted back-office processes."""
        return cls(id=None, role="system")

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_system(self) -> bool:
        return self.role == "system"

    @property
    def is_authenticated(self) -> bool:
        return self.id is not None

    def is_(self, profile_id: Optional[UUID]) -> bool:
        return self.id is not None and self.id == profile_id
