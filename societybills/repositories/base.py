from abc import ABC, abstractmethod

from societybills.models.audit_log import AuditLog
from societybills.models.bill import MaintenanceBill
from societybills.models.billing_config import BillingConfig
from societybills.models.notification import Notification
from societybills.models.requests import BillFilters


class BillRepository(ABC):
    @abstractmethod
    def create(self, bill: MaintenanceBill) -> MaintenanceBill: ...

    @abstractmethod
    def get(self, bill_id: str, society_id: str) -> MaintenanceBill | None: ...

    @abstractmethod
    def list_by_society(self, society_id: str, filters: BillFilters | None = None) -> list[MaintenanceBill]: ...

    @abstractmethod
    def list_unsettled(self, society_id: str) -> list[MaintenanceBill]: ...

    @abstractmethod
    def update(self, bill: MaintenanceBill, expected_version: int) -> MaintenanceBill: ...

    @abstractmethod
    def delete(self, bill_id: str, society_id: str) -> None: ...


class BillingConfigRepository(ABC):
    @abstractmethod
    def create(self, config: BillingConfig) -> BillingConfig: ...

    @abstractmethod
    def list_by_society(self, society_id: str) -> list[BillingConfig]: ...


class AuditLogRepository(ABC):
    @abstractmethod
    def create(self, audit_log: AuditLog) -> AuditLog: ...

    @abstractmethod
    def list_by_entity(self, entity_type: str, entity_id: str) -> list[AuditLog]: ...

    @abstractmethod
    def list_by_society(self, society_id: str, limit: int = 50) -> list[AuditLog]: ...


class NotificationRepository(ABC):
    @abstractmethod
    def create(self, notification: Notification) -> Notification: ...

    @abstractmethod
    def list_for_user(self, user_id: str, limit: int = 20) -> list[Notification]: ...

    @abstractmethod
    def list_for_society_admins(self, society_id: str, limit: int = 20) -> list[Notification]: ...

    @abstractmethod
    def get(self, notification_uuid: str) -> Notification | None: ...

    @abstractmethod
    def mark_read(self, notification_uuid: str) -> None: ...
