from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from societybills.constants import ZERO
from societybills.models.base import DocumentModel, Money


class BillStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"
    OVERDUE = "overdue"


class ApprovalStatus(str, Enum):
    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"
    PUBLISHED = "published"


class ChangeType(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


class AdHocCharge(DocumentModel):
    label: str
    amount: Money
    description: str | None = None
    is_one_time: bool = True
    category_key: str | None = None


class ApprovalEntry(DocumentModel):
    status: ApprovalStatus
    changed_by: str
    changed_by_name: str | None = None
    changed_at: datetime
    notes: str | None = None


class AuditEntry(DocumentModel):
    id: str
    changed_by: str
    changed_by_name: str | None = None
    changed_by_role: str | None = None
    changed_at: datetime
    change_type: ChangeType
    before: dict[str, Any] | None = None
    after: dict[str, Any] | None = None
    field: str | None = None
    notes: str | None = None


class MaintenanceBill(DocumentModel):
    id: str = ""
    society_id: str
    flat_number: str
    user_id: str | None = None
    flat_type: str | None = None
    period: str  # 'YYYY-MM'
    amount: Decimal = ZERO
    due_date: date
    status: BillStatus = BillStatus.UNPAID
    paid_at: datetime | None = None
    generated_at: datetime | None = None
    notes: str | None = None
    breakdown: dict[str, Decimal] = {}
    discount_amount: Decimal | None = None
    discount_reason: str | None = None
    waiver_amount: Decimal | None = None
    waiver_reason: str | None = None
    penalty_amount: Decimal | None = None
    penalty_reason: str | None = None
    interest_amount: Decimal | None = None
    interest_reason: str | None = None
    ad_hoc_charges: list[AdHocCharge] | None = None
    approval_status: ApprovalStatus = ApprovalStatus.DRAFT
    approval_history: list[ApprovalEntry] = []
    audit_trail: list[AuditEntry] = []
    version: int = 1

    @property
    def base_total(self) -> Decimal:
        return sum(self.breakdown.values(), ZERO)

    @property
    def ad_hoc_total(self) -> Decimal:
        return sum((charge.amount for charge in self.ad_hoc_charges or []), ZERO)

    @property
    def interest_principal(self) -> Decimal:
        return max(ZERO, self.base_total - (self.discount_amount or ZERO) - (self.waiver_amount or ZERO))

    def adjustments_total(self) -> Decimal:
        """Signed sum of everything applied on top of the base breakdown."""
        added = (self.penalty_amount or ZERO) + self.ad_hoc_total + (self.interest_amount or ZERO)
        removed = (self.discount_amount or ZERO) + (self.waiver_amount or ZERO)
        return added - removed

    def computed_amount(self) -> Decimal:
        """Net payable derived from the stored components."""
        return self.base_total + self.adjustments_total()
