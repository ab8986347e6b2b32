from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class ActorRole(str, Enum):
    SOCIETY_ADMIN = "society_admin"
    ADMIN = "admin"
    OWNER = "owner"
    RENTER = "renter"
    SYSTEM = "system"


APPROVER_ROLES = frozenset({ActorRole.SOCIETY_ADMIN.value})
EDITOR_ROLES = frozenset({ActorRole.SOCIETY_ADMIN.value, ActorRole.ADMIN.value, ActorRole.SYSTEM.value})


class Actor(BaseModel):
    id: str
    name: str | None = None
    role: str | None = None

    @property
    def can_approve(self) -> bool:
        return self.role in APPROVER_ROLES

    @property
    def can_edit(self) -> bool:
        return self.role in EDITOR_ROLES


# Reserved for unattended jobs such as the scheduled interest sweep.
SYSTEM_ACTOR = Actor(id="system", name="System", role=ActorRole.SYSTEM.value)
