from __future__ import annotations

import logging

from societybills.exceptions import PermissionDeniedError, ValidationError
from societybills.models.actor import Actor
from societybills.models.audit_log import AuditLog
from societybills.repositories.base import AuditLogRepository

logger = logging.getLogger(__name__)


class AuditService:
    """Durable, society-level audit log kept outside the entities it describes."""

    def __init__(self, repo: AuditLogRepository) -> None:
        self.repo = repo

    def log(
        self,
        event_type: str,
        *,
        actor: Actor,
        society_id: str = "",
        entity_type: str = "",
        entity_id: str = "",
        previous_state: dict | None = None,
        new_state: dict | None = None,
        metadata: dict | None = None,
    ) -> AuditLog:
        """Create an audit log entry. Raises on failure."""
        audit_log = AuditLog(
            event_type=event_type,
            actor_id=actor.id,
            actor_name=actor.name or "",
            society_id=society_id,
            entity_type=entity_type,
            entity_id=entity_id,
            previous_state=previous_state,
            new_state=new_state,
            metadata=metadata or {},
        )
        result = self.repo.create(audit_log)
        logger.info(
            "Audit logged: event=%s actor=%s society=%s entity=%s/%s",
            event_type,
            actor.name or actor.id,
            society_id,
            entity_type,
            entity_id,
        )
        return result

    def safe_log(self, *args, **kwargs) -> AuditLog | None:
        """Create an audit log entry, swallowing any exceptions."""
        try:
            return self.log(*args, **kwargs)
        except Exception:
            logger.exception("Failed to write audit log")
            return None

    def list_logs(
        self,
        society_id: str,
        actor: Actor,
        entity_type: str | None = None,
        entity_id: str | None = None,
        limit: int = 50,
    ) -> list[AuditLog]:
        """Society log newest first, or one entity's history oldest first."""
        if not actor.can_edit:
            raise PermissionDeniedError(f"Actor {actor.id} may not read audit logs")
        if not society_id:
            raise ValidationError("societyId is required")
        if entity_type and entity_id:
            logs = [log for log in self.repo.list_by_entity(entity_type, entity_id) if log.society_id == society_id]
        else:
            logs = self.repo.list_by_society(society_id, limit)
        logger.debug("Listed %d audit logs for society=%s", len(logs), society_id)
        return logs
