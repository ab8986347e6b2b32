"""Inbound request shapes for the bill operations."""

from __future__ import annotations

from datetime import date

from societybills.models.base import DocumentModel, Money
from societybills.models.bill import AdHocCharge, ApprovalStatus, BillStatus


class FlatRequest(DocumentModel):
    flat_number: str
    flat_type: str | None = None
    user_id: str | None = None
    discount_amount: Money | None = None
    discount_reason: str | None = None
    waiver_amount: Money | None = None
    waiver_reason: str | None = None
    penalty_amount: Money | None = None
    penalty_reason: str | None = None
    ad_hoc_charges: list[AdHocCharge] = []


class PeriodSpec(DocumentModel):
    """Either explicit periods, a single period, or frequency x count from a start period."""

    periods: list[str] | None = None
    period: str | None = None
    frequency: str | None = None
    count: int | None = None
    start_period: str | None = None


class GenerateBillsRequest(PeriodSpec):
    society_id: str = ""
    due_date: date | None = None
    notes: str | None = None
    flats: list[FlatRequest] | None = None


class BillFilters(DocumentModel):
    user_id: str | None = None
    flat_number: str | None = None
    period: str | None = None


class BillUpdate(DocumentModel):
    """Adjustment edits merged onto a stored bill. Unset fields are left alone."""

    notes: str | None = None
    due_date: date | None = None
    status: BillStatus | None = None
    ad_hoc_charges: list[AdHocCharge] | None = None
    discount_amount: Money | None = None
    discount_reason: str | None = None
    waiver_amount: Money | None = None
    waiver_reason: str | None = None
    penalty_amount: Money | None = None
    penalty_reason: str | None = None
    approval_status: ApprovalStatus | None = None
    approval_notes: str | None = None
    audit_notes: str | None = None


class CreateBillRequest(DocumentModel):
    """Manual single bill, priced by the caller."""

    society_id: str = ""
    flat_number: str = ""
    user_id: str = ""
    period: str = ""
    amount: Money | None = None
    due_date: date | None = None
    notes: str | None = None


class UpdateBillRequest(BillUpdate):
    society_id: str = ""
    version: int


class TransitionRequest(DocumentModel):
    society_id: str = ""
    version: int
    to_status: ApprovalStatus
    notes: str | None = None
