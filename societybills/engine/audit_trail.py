"""Append-only change log embedded in bills and billing configs.

Functions never modify the trail they are given; they return a new list with
exactly one entry appended. Timestamps never go backwards within a trail.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from ulid import ULID

from societybills.constants import now as _now
from societybills.models.actor import Actor
from societybills.models.base import DocumentModel
from societybills.models.bill import AuditEntry, ChangeType


def snapshot(entity: DocumentModel) -> dict[str, Any]:
    """Full document of ``entity`` minus its own audit trail."""
    document = entity.to_document()
    document.pop("auditTrail", None)
    return document


def _stamp(trail: list[AuditEntry], at: datetime | None) -> datetime:
    stamp = at or _now()
    if trail and trail[-1].changed_at > stamp:
        return trail[-1].changed_at
    return stamp


def _append(trail: list[AuditEntry], actor: Actor, change_type: ChangeType, at: datetime | None, **fields) -> list[AuditEntry]:
    entry = AuditEntry(
        id=str(ULID()),
        changed_by=actor.id,
        changed_by_name=actor.name,
        changed_by_role=actor.role,
        changed_at=_stamp(trail, at),
        change_type=change_type,
        **fields,
    )
    return [*trail, entry]


def record_created(
    trail: list[AuditEntry],
    actor: Actor,
    notes: str | None = None,
    after: dict[str, Any] | None = None,
    at: datetime | None = None,
) -> list[AuditEntry]:
    return _append(trail, actor, ChangeType.CREATED, at, after=after, notes=notes)


def record_updated(
    trail: list[AuditEntry],
    actor: Actor,
    before: dict[str, Any],
    after: dict[str, Any],
    notes: str | None = None,
    field: str | None = None,
    at: datetime | None = None,
) -> list[AuditEntry]:
    return _append(trail, actor, ChangeType.UPDATED, at, before=before, after=after, notes=notes, field=field)


def record_deleted(
    trail: list[AuditEntry],
    actor: Actor,
    before: dict[str, Any],
    notes: str | None = None,
    at: datetime | None = None,
) -> list[AuditEntry]:
    return _append(trail, actor, ChangeType.DELETED, at, before=before, notes=notes)
