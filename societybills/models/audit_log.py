from __future__ import annotations

from datetime import datetime

from societybills.models.base import DocumentModel


class AuditEventType:
    """String constants for all audit event types."""

    BILL_CREATE = "bill.create"
    BILL_UPDATE = "bill.update"
    BILL_TRANSITION = "bill.transition"
    BILL_DELETE = "bill.delete"
    BILL_INTEREST_RECALCULATED = "bill.interest_recalculated"

    BILLING_CONFIG_CREATE = "billing_config.create"


class AuditLog(DocumentModel):
    id: int | None = None
    uuid: str = ""
    event_type: str
    actor_id: str = ""
    actor_name: str = ""
    society_id: str = ""
    entity_type: str = ""
    entity_id: str = ""
    previous_state: dict | None = None  # JSON (None for creates)
    new_state: dict | None = None  # JSON (None for deletes)
    metadata: dict = {}
    created_at: datetime | None = None
