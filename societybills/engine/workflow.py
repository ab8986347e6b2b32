from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum

from societybills.constants import now as _now
from societybills.exceptions import InvalidTransitionError, PermissionDeniedError
from societybills.models.actor import Actor
from societybills.models.bill import ApprovalEntry, ApprovalStatus

logger = logging.getLogger(__name__)


class Capability(str, Enum):
    EDIT = "edit"
    APPROVE = "approve"


TRANSITIONS: dict[tuple[ApprovalStatus, ApprovalStatus], Capability] = {
    (ApprovalStatus.DRAFT, ApprovalStatus.PENDING_APPROVAL): Capability.EDIT,
    (ApprovalStatus.PENDING_APPROVAL, ApprovalStatus.APPROVED): Capability.APPROVE,
    (ApprovalStatus.PENDING_APPROVAL, ApprovalStatus.REJECTED): Capability.APPROVE,
    (ApprovalStatus.APPROVED, ApprovalStatus.PUBLISHED): Capability.EDIT,
}


def allowed_transitions(status: ApprovalStatus) -> list[ApprovalStatus]:
    return [target for (source, target) in TRANSITIONS if source == status]


def _has_capability(actor: Actor, capability: Capability) -> bool:
    if capability == Capability.APPROVE:
        return actor.can_approve
    return actor.can_edit


def check_transition(current: ApprovalStatus, target: ApprovalStatus, actor: Actor) -> None:
    capability = TRANSITIONS.get((current, target))
    if capability is None:
        logger.warning("Rejected transition %s -> %s by actor=%s", current.value, target.value, actor.id)
        raise InvalidTransitionError(current.value, target.value)
    if not _has_capability(actor, capability):
        logger.warning(
            "Actor %s (role=%s) lacks %s capability for %s -> %s",
            actor.id,
            actor.role,
            capability.value,
            current.value,
            target.value,
        )
        raise PermissionDeniedError(f"Actor {actor.id} may not move a bill from {current.value} to {target.value}")


def seed_history(actor: Actor, at: datetime, notes: str | None = None) -> list[ApprovalEntry]:
    return [
        ApprovalEntry(
            status=ApprovalStatus.DRAFT,
            changed_by=actor.id,
            changed_by_name=actor.name,
            changed_at=at,
            notes=notes,
        )
    ]


def transition(
    current: ApprovalStatus,
    history: list[ApprovalEntry],
    target: ApprovalStatus,
    actor: Actor,
    notes: str | None = None,
    at: datetime | None = None,
) -> list[ApprovalEntry]:
    """Validate ``current -> target`` and return ``history`` with one entry appended."""
    check_transition(current, target, actor)
    stamp = at or _now()
    if history and history[-1].changed_at > stamp:
        stamp = history[-1].changed_at
    entry = ApprovalEntry(
        status=target,
        changed_by=actor.id,
        changed_by_name=actor.name,
        changed_at=stamp,
        notes=notes,
    )
    return [*history, entry]
