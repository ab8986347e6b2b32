from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy import Connection, text
from sqlalchemy.engine import RowMapping
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from ulid import ULID

from societybills.constants import now as _now
from societybills.exceptions import ConflictError, DuplicateConfigError, NotFoundError, PersistenceError
from societybills.models.audit_log import AuditLog
from societybills.models.bill import MaintenanceBill
from societybills.models.billing_config import BillingConfig
from societybills.models.notification import Notification
from societybills.models.requests import BillFilters
from societybills.repositories.base import (
    AuditLogRepository,
    BillingConfigRepository,
    BillRepository,
    NotificationRepository,
)


def _timestamp(value: datetime | None = None) -> str:
    """UTC ISO string, so text ordering matches time ordering."""
    return (value or _now()).astimezone(timezone.utc).isoformat()


@contextmanager
def _translate_errors(conn: Connection, operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        conn.rollback()
        raise PersistenceError(f"{operation} failed: {exc}") from exc


class SQLAlchemyBillRepository(BillRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    @staticmethod
    def _row_to_bill(row: RowMapping) -> MaintenanceBill:
        bill = MaintenanceBill.model_validate(json.loads(row["document"]))
        bill.version = row["version"]
        return bill

    @staticmethod
    def _params(bill: MaintenanceBill) -> dict:
        return {
            "id": bill.id,
            "society_id": bill.society_id,
            "user_id": bill.user_id,
            "flat_number": bill.flat_number,
            "period": bill.period,
            "status": bill.status.value,
            "approval_status": bill.approval_status.value,
            "generated_at": _timestamp(bill.generated_at),
            "version": bill.version,
            "document": json.dumps(bill.to_document()),
        }

    def create(self, bill: MaintenanceBill) -> MaintenanceBill:
        if not bill.id:
            bill.id = str(ULID())
        if bill.generated_at is None:
            bill.generated_at = _now()
        with _translate_errors(self.conn, "Bill create"):
            self.conn.execute(
                text(
                    "INSERT INTO maintenance_bills (id, society_id, user_id, flat_number, period, status, "
                    "approval_status, generated_at, version, document) "
                    "VALUES (:id, :society_id, :user_id, :flat_number, :period, :status, "
                    ":approval_status, :generated_at, :version, :document)"
                ),
                self._params(bill),
            )
            self.conn.commit()
        result = self.get(bill.id, bill.society_id)
        if result is None:
            raise PersistenceError(f"Failed to retrieve bill after create (id={bill.id})")
        return result

    def get(self, bill_id: str, society_id: str) -> MaintenanceBill | None:
        with _translate_errors(self.conn, "Bill read"):
            row = (
                self.conn.execute(
                    text("SELECT * FROM maintenance_bills WHERE id = :id AND society_id = :society_id"),
                    {"id": bill_id, "society_id": society_id},
                )
                .mappings()
                .fetchone()
            )
        if row is None:
            return None
        return self._row_to_bill(row)

    def list_by_society(self, society_id: str, filters: BillFilters | None = None) -> list[MaintenanceBill]:
        query = "SELECT * FROM maintenance_bills WHERE society_id = :society_id"
        params: dict = {"society_id": society_id}
        if filters is not None:
            if filters.user_id:
                query += " AND user_id = :user_id"
                params["user_id"] = filters.user_id
            if filters.flat_number:
                query += " AND flat_number = :flat_number"
                params["flat_number"] = filters.flat_number
            if filters.period:
                query += " AND period = :period"
                params["period"] = filters.period
        query += " ORDER BY generated_at DESC, id DESC"
        with _translate_errors(self.conn, "Bill list"):
            rows = self.conn.execute(text(query), params).mappings().fetchall()
        return [self._row_to_bill(row) for row in rows]

    def list_unsettled(self, society_id: str) -> list[MaintenanceBill]:
        with _translate_errors(self.conn, "Bill list"):
            rows = (
                self.conn.execute(
                    text(
                        "SELECT * FROM maintenance_bills WHERE society_id = :society_id "
                        "AND status IN ('unpaid', 'overdue') ORDER BY period, id"
                    ),
                    {"society_id": society_id},
                )
                .mappings()
                .fetchall()
            )
        return [self._row_to_bill(row) for row in rows]

    def update(self, bill: MaintenanceBill, expected_version: int) -> MaintenanceBill:
        bill.version = expected_version + 1
        params = self._params(bill)
        params["expected_version"] = expected_version
        with _translate_errors(self.conn, "Bill update"):
            result = self.conn.execute(
                text(
                    "UPDATE maintenance_bills SET user_id = :user_id, flat_number = :flat_number, "
                    "period = :period, status = :status, approval_status = :approval_status, "
                    "version = :version, document = :document "
                    "WHERE id = :id AND society_id = :society_id AND version = :expected_version"
                ),
                params,
            )
            self.conn.commit()
        if result.rowcount == 0:
            bill.version = expected_version
            current = self.get(bill.id, bill.society_id)
            if current is None:
                raise NotFoundError(f"Bill {bill.id} not found")
            raise ConflictError(
                f"Bill {bill.id} was modified concurrently (expected version {expected_version}, "
                f"found {current.version})"
            )
        return bill

    def delete(self, bill_id: str, society_id: str) -> None:
        with _translate_errors(self.conn, "Bill delete"):
            self.conn.execute(
                text("DELETE FROM maintenance_bills WHERE id = :id AND society_id = :society_id"),
                {"id": bill_id, "society_id": society_id},
            )
            self.conn.commit()


class SQLAlchemyBillingConfigRepository(BillingConfigRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    def create(self, config: BillingConfig) -> BillingConfig:
        if not config.id:
            config.id = str(ULID())
        if config.updated_at is None:
            config.updated_at = _now()
        with _translate_errors(self.conn, "Billing config create"):
            try:
                self.conn.execute(
                    text(
                        "INSERT INTO billing_configs (id, society_id, effective_from, document, created_at) "
                        "VALUES (:id, :society_id, :effective_from, :document, :created_at)"
                    ),
                    {
                        "id": config.id,
                        "society_id": config.society_id,
                        "effective_from": config.effective_from.isoformat(),
                        "document": json.dumps(config.to_document()),
                        "created_at": _timestamp(),
                    },
                )
            except IntegrityError as exc:
                self.conn.rollback()
                raise DuplicateConfigError(config.effective_from.isoformat()) from exc
            self.conn.commit()
        return config

    def list_by_society(self, society_id: str) -> list[BillingConfig]:
        # Save order; resolution ties go to the config saved last.
        with _translate_errors(self.conn, "Billing config list"):
            rows = (
                self.conn.execute(
                    text("SELECT * FROM billing_configs WHERE society_id = :society_id ORDER BY seq"),
                    {"society_id": society_id},
                )
                .mappings()
                .fetchall()
            )
        return [BillingConfig.model_validate(json.loads(row["document"])) for row in rows]


class SQLAlchemyAuditLogRepository(AuditLogRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    @staticmethod
    def _row_to_audit_log(row: RowMapping) -> AuditLog:
        previous_state = row["previous_state"]
        if isinstance(previous_state, str):
            previous_state = json.loads(previous_state)
        new_state = row["new_state"]
        if isinstance(new_state, str):
            new_state = json.loads(new_state)
        metadata = row["metadata"]
        if isinstance(metadata, str):
            metadata = json.loads(metadata)

        return AuditLog(
            id=row["id"],
            uuid=row["uuid"],
            event_type=row["event_type"],
            actor_id=row["actor_id"],
            actor_name=row["actor_name"],
            society_id=row["society_id"],
            entity_type=row["entity_type"],
            entity_id=row["entity_id"],
            previous_state=previous_state,
            new_state=new_state,
            metadata=metadata,
            created_at=row["created_at"],
        )

    def create(self, audit_log: AuditLog) -> AuditLog:
        audit_uuid = str(ULID())
        with _translate_errors(self.conn, "Audit log create"):
            self.conn.execute(
                text(
                    "INSERT INTO audit_logs (uuid, event_type, actor_id, actor_name, society_id, "
                    "entity_type, entity_id, previous_state, new_state, metadata, created_at) "
                    "VALUES (:uuid, :event_type, :actor_id, :actor_name, :society_id, "
                    ":entity_type, :entity_id, :previous_state, :new_state, :metadata, :created_at)"
                ),
                {
                    "uuid": audit_uuid,
                    "event_type": audit_log.event_type,
                    "actor_id": audit_log.actor_id,
                    "actor_name": audit_log.actor_name,
                    "society_id": audit_log.society_id,
                    "entity_type": audit_log.entity_type,
                    "entity_id": audit_log.entity_id,
                    "previous_state": json.dumps(audit_log.previous_state)
                    if audit_log.previous_state is not None
                    else None,
                    "new_state": json.dumps(audit_log.new_state) if audit_log.new_state is not None else None,
                    "metadata": json.dumps(audit_log.metadata),
                    "created_at": _timestamp(),
                },
            )
            self.conn.commit()

            row = (
                self.conn.execute(
                    text("SELECT * FROM audit_logs WHERE uuid = :uuid"),
                    {"uuid": audit_uuid},
                )
                .mappings()
                .fetchone()
            )
        if row is None:
            raise PersistenceError(f"Failed to retrieve audit log after create (uuid={audit_uuid})")
        return self._row_to_audit_log(row)

    def list_by_entity(self, entity_type: str, entity_id: str) -> list[AuditLog]:
        with _translate_errors(self.conn, "Audit log list"):
            rows = (
                self.conn.execute(
                    text(
                        "SELECT * FROM audit_logs WHERE entity_type = :entity_type "
                        "AND entity_id = :entity_id ORDER BY id"
                    ),
                    {"entity_type": entity_type, "entity_id": entity_id},
                )
                .mappings()
                .fetchall()
            )
        return [self._row_to_audit_log(row) for row in rows]

    def list_by_society(self, society_id: str, limit: int = 50) -> list[AuditLog]:
        with _translate_errors(self.conn, "Audit log list"):
            rows = (
                self.conn.execute(
                    text("SELECT * FROM audit_logs WHERE society_id = :society_id ORDER BY id DESC LIMIT :limit"),
                    {"society_id": society_id, "limit": limit},
                )
                .mappings()
                .fetchall()
            )
        return [self._row_to_audit_log(row) for row in rows]


class SQLAlchemyNotificationRepository(NotificationRepository):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    @staticmethod
    def _row_to_notification(row: RowMapping) -> Notification:
        return Notification(
            id=row["id"],
            uuid=row["uuid"],
            audience=row["audience"],
            user_id=row["user_id"],
            society_id=row["society_id"],
            type=row["type"],
            title=row["title"],
            message=row["message"],
            link=row["link"],
            read=bool(row["is_read"]),
            created_at=row["created_at"],
        )

    def create(self, notification: Notification) -> Notification:
        notification_uuid = str(ULID())
        with _translate_errors(self.conn, "Notification create"):
            self.conn.execute(
                text(
                    "INSERT INTO notifications (uuid, audience, user_id, society_id, type, title, "
                    "message, link, is_read, created_at) "
                    "VALUES (:uuid, :audience, :user_id, :society_id, :type, :title, "
                    ":message, :link, :is_read, :created_at)"
                ),
                {
                    "uuid": notification_uuid,
                    "audience": notification.audience,
                    "user_id": notification.user_id,
                    "society_id": notification.society_id,
                    "type": notification.type,
                    "title": notification.title,
                    "message": notification.message,
                    "link": notification.link,
                    "is_read": 1 if notification.read else 0,
                    "created_at": _timestamp(),
                },
            )
            self.conn.commit()
            row = (
                self.conn.execute(
                    text("SELECT * FROM notifications WHERE uuid = :uuid"),
                    {"uuid": notification_uuid},
                )
                .mappings()
                .fetchone()
            )
        if row is None:
            raise PersistenceError(f"Failed to retrieve notification after create (uuid={notification_uuid})")
        return self._row_to_notification(row)

    def list_for_user(self, user_id: str, limit: int = 20) -> list[Notification]:
        with _translate_errors(self.conn, "Notification list"):
            rows = (
                self.conn.execute(
                    text(
                        "SELECT * FROM notifications WHERE audience = 'user' AND user_id = :user_id "
                        "ORDER BY id DESC LIMIT :limit"
                    ),
                    {"user_id": user_id, "limit": limit},
                )
                .mappings()
                .fetchall()
            )
        return [self._row_to_notification(row) for row in rows]

    def list_for_society_admins(self, society_id: str, limit: int = 20) -> list[Notification]:
        with _translate_errors(self.conn, "Notification list"):
            rows = (
                self.conn.execute(
                    text(
                        "SELECT * FROM notifications WHERE audience = 'admins' AND society_id = :society_id "
                        "ORDER BY id DESC LIMIT :limit"
                    ),
                    {"society_id": society_id, "limit": limit},
                )
                .mappings()
                .fetchall()
            )
        return [self._row_to_notification(row) for row in rows]

    def get(self, notification_uuid: str) -> Notification | None:
        with _translate_errors(self.conn, "Notification get"):
            row = (
                self.conn.execute(
                    text("SELECT * FROM notifications WHERE uuid = :uuid"),
                    {"uuid": notification_uuid},
                )
                .mappings()
                .fetchone()
            )
        return self._row_to_notification(row) if row is not None else None

    def mark_read(self, notification_uuid: str) -> None:
        with _translate_errors(self.conn, "Notification mark read"):
            result = self.conn.execute(
                text("UPDATE notifications SET is_read = 1 WHERE uuid = :uuid"),
                {"uuid": notification_uuid},
            )
            self.conn.commit()
        if result.rowcount == 0:
            raise NotFoundError(f"Notification {notification_uuid} not found")
