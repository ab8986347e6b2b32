from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal

from societybills.constants import APP_TZ, quantize
from societybills.constants import now as _now
from societybills.engine import audit_trail, config_resolver, interest, workflow
from societybills.engine.factory import BatchResult, PartialBatchPolicy, generate_batch
from societybills.exceptions import (
    ConfigNotFoundError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from societybills.models.actor import SYSTEM_ACTOR, Actor
from societybills.models.audit_log import AuditEventType
from societybills.models.bill import ApprovalStatus, BillStatus, MaintenanceBill
from societybills.models.requests import BillFilters, BillUpdate, GenerateBillsRequest
from societybills.notifications.dispatch import NotificationDispatcher, UserNotice
from societybills.periods import expand_periods, format_period, parse_period
from societybills.repositories.base import BillRepository
from societybills.services.audit_service import AuditService
from societybills.services.billing_config_service import BillingConfigService
from societybills.settings import settings

logger = logging.getLogger(__name__)

RESIDENT_LINK = "/dashboard/my-bills"
ADMIN_LINK = "/dashboard/admin/manage-billing"

# BillUpdate fields copied onto the bill as-is.
_PLAIN_FIELDS = ("notes", "due_date", "ad_hoc_charges", "discount_reason", "waiver_reason", "penalty_reason")
_MONEY_FIELDS = ("discount_amount", "waiver_amount", "penalty_amount")


class BillService:
    def __init__(
        self,
        bill_repo: BillRepository,
        config_service: BillingConfigService,
        audit_service: AuditService,
        dispatcher: NotificationDispatcher | None = None,
    ) -> None:
        self.bill_repo = bill_repo
        self.config_service = config_service
        self.audit_service = audit_service
        self.dispatcher = dispatcher

    # ---- Queries ----

    def list_bills(self, society_id: str, filters: BillFilters | None = None) -> list[MaintenanceBill]:
        if not society_id:
            raise ValidationError("societyId is required")
        result = self.bill_repo.list_by_society(society_id, filters)
        logger.debug("Listed %d bills for society=%s filters=%s", len(result), society_id, filters)
        return result

    def get_bill(self, bill_id: str, society_id: str) -> MaintenanceBill | None:
        result = self.bill_repo.get(bill_id, society_id)
        logger.debug("get_bill id=%s society=%s found=%s", bill_id, society_id, result is not None)
        return result

    def _require_bill(self, bill_id: str, society_id: str) -> MaintenanceBill:
        bill = self.bill_repo.get(bill_id, society_id)
        if bill is None:
            logger.warning("Bill not found: id=%s society=%s", bill_id, society_id)
            raise NotFoundError("Bill not found")
        return bill

    # ---- Creation ----

    def generate_bills(
        self,
        request: GenerateBillsRequest,
        actor: Actor,
        now: datetime | None = None,
    ) -> BatchResult:
        """Compute, persist and announce bills for every flat and period in ``request``.

        All validation happens before the first write. Bills already written
        stay persisted if a later write fails.
        """
        if not actor.can_edit:
            raise PermissionDeniedError(f"Actor {actor.id} may not generate bills")
        if not request.society_id or request.due_date is None or request.flats is None:
            raise ValidationError("societyId, dueDate, flats[] required")
        periods = expand_periods(request)
        society_id = request.society_id
        now = now or _now()

        configs = self.config_service.list_configs(society_id)
        result = generate_batch(
            configs,
            request.flats,
            periods,
            request.due_date,
            now,
            actor,
            society_id,
            notes=request.notes,
            workers=settings.generation_workers,
            policy=PartialBatchPolicy(settings.partial_batch_policy),
        )

        persisted: list[MaintenanceBill] = []
        for bill in result.bills:
            persisted.append(self.bill_repo.create(bill))
        logger.info(
            "Bills generated: society=%s periods=%s count=%d failed_periods=%d",
            society_id,
            ",".join(periods),
            len(persisted),
            len(result.failures),
        )

        for bill in persisted:
            self.audit_service.safe_log(
                AuditEventType.BILL_CREATE,
                actor=actor,
                society_id=society_id,
                entity_type="bill",
                entity_id=bill.id,
                new_state=audit_trail.snapshot(bill),
            )

        if self.dispatcher is not None and persisted:
            self.dispatcher.notify_many(
                [
                    UserNotice(
                        bill.user_id,
                        "billing",
                        "New Maintenance Bill",
                        f"A new maintenance bill for period {bill.period} has been generated.",
                        RESIDENT_LINK,
                    )
                    for bill in persisted
                    if bill.user_id
                ]
            )
            generated_periods = sorted({bill.period for bill in persisted})
            self.dispatcher.notify_admins(
                society_id,
                "billing",
                "Bills Generated",
                f"Maintenance bills for period(s) {', '.join(generated_periods)} have been generated.",
                ADMIN_LINK,
            )

        return BatchResult(bills=persisted, failures=result.failures)

    def create_single_bill(
        self,
        society_id: str,
        flat_number: str,
        user_id: str,
        period: str,
        amount: Decimal | None,
        due_date: date | None,
        notes: str | None,
        actor: Actor,
    ) -> MaintenanceBill:
        """Manual invoice that bypasses the rule engine."""
        if not actor.can_edit:
            raise PermissionDeniedError(f"Actor {actor.id} may not create bills")
        if not society_id or not flat_number or not user_id or not period or not amount or due_date is None:
            raise ValidationError("Missing required fields")
        now = _now()
        bill = MaintenanceBill(
            society_id=society_id,
            flat_number=flat_number,
            user_id=user_id,
            period=format_period(parse_period(period)),
            amount=quantize(amount),
            due_date=due_date,
            status=BillStatus.UNPAID,
            generated_at=now,
            notes=notes,
            approval_status=ApprovalStatus.DRAFT,
            approval_history=workflow.seed_history(actor, now, "Bill created as draft."),
            audit_trail=audit_trail.record_created([], actor, "Bill created.", at=now),
        )
        created = self.bill_repo.create(bill)
        logger.info(
            "Bill created: id=%s society=%s flat=%s period=%s amount=%s",
            created.id,
            society_id,
            flat_number,
            created.period,
            created.amount,
        )
        self.audit_service.safe_log(
            AuditEventType.BILL_CREATE,
            actor=actor,
            society_id=society_id,
            entity_type="bill",
            entity_id=created.id,
            new_state=audit_trail.snapshot(created),
            metadata={"manual": True},
        )
        if self.dispatcher is not None:
            self.dispatcher.notify(
                user_id,
                "billing",
                "New Maintenance Bill",
                f"A new maintenance bill for period {created.period} has been generated.",
                RESIDENT_LINK,
            )
            self.dispatcher.notify_admins(
                society_id,
                "billing",
                "Bill Created",
                f"A maintenance bill for flat {flat_number} ({created.period}) has been created.",
                ADMIN_LINK,
            )
        return created

    # ---- Mutation ----

    def update_bill(
        self,
        bill_id: str,
        society_id: str,
        updates: BillUpdate,
        expected_version: int,
        actor: Actor,
    ) -> MaintenanceBill:
        """Merge ``updates`` onto the stored bill and append one audit entry.

        Money edits keep ``amount`` consistent with its components; an
        approval status change goes through the workflow.
        """
        if not actor.can_edit:
            raise PermissionDeniedError(f"Actor {actor.id} may not edit bills")
        existing = self._require_bill(bill_id, society_id)
        if existing.version != expected_version:
            logger.warning(
                "Stale update rejected: bill=%s expected_version=%s stored=%s",
                bill_id,
                expected_version,
                existing.version,
            )
            raise ConflictError(
                f"Bill {bill_id} was modified concurrently (expected version {expected_version}, "
                f"found {existing.version})"
            )

        changes = updates.model_dump(exclude_unset=True)
        updated = existing.model_copy(deep=True)
        now = _now()

        for name in _PLAIN_FIELDS:
            if name in changes:
                setattr(updated, name, getattr(updates, name))
        for name in _MONEY_FIELDS:
            if name in changes:
                value = getattr(updates, name)
                setattr(updated, name, quantize(value) if value else None)
        if any(name in changes for name in ("ad_hoc_charges", *_MONEY_FIELDS)):
            updated.amount = quantize(existing.amount - existing.adjustments_total() + updated.adjustments_total())

        if updates.status is not None and updates.status != existing.status:
            updated.status = updates.status
            updated.paid_at = now if updates.status == BillStatus.PAID else None

        event_type = AuditEventType.BILL_UPDATE
        if updates.approval_status is not None and updates.approval_status != existing.approval_status:
            updated.approval_history = workflow.transition(
                existing.approval_status,
                existing.approval_history,
                updates.approval_status,
                actor,
                notes=updates.approval_notes,
                at=now,
            )
            updated.approval_status = updates.approval_status
            event_type = AuditEventType.BILL_TRANSITION

        before = audit_trail.snapshot(existing)
        updated.audit_trail = audit_trail.record_updated(
            existing.audit_trail,
            actor,
            before=before,
            after=audit_trail.snapshot(updated),
            notes=updates.audit_notes or "Bill updated.",
            field="approvalStatus" if event_type == AuditEventType.BILL_TRANSITION else None,
            at=now,
        )

        saved = self.bill_repo.update(updated, expected_version)
        logger.info(
            "Bill updated: id=%s version=%s approval_status=%s amount=%s",
            saved.id,
            saved.version,
            saved.approval_status.value,
            saved.amount,
        )
        self.audit_service.safe_log(
            event_type,
            actor=actor,
            society_id=society_id,
            entity_type="bill",
            entity_id=saved.id,
            previous_state=before,
            new_state=audit_trail.snapshot(saved),
        )
        return saved

    def transition(
        self,
        bill_id: str,
        society_id: str,
        to_status: ApprovalStatus,
        expected_version: int,
        actor: Actor,
        notes: str | None = None,
    ) -> MaintenanceBill:
        return self.update_bill(
            bill_id,
            society_id,
            BillUpdate(approval_status=to_status, approval_notes=notes, audit_notes=f"Approval status set to {to_status.value}."),
            expected_version,
            actor,
        )

    def delete_bill(self, bill_id: str, society_id: str, actor: Actor) -> None:
        """Hard delete, after writing a durable tombstone to the audit log."""
        if not actor.can_edit:
            raise PermissionDeniedError(f"Actor {actor.id} may not delete bills")
        existing = self._require_bill(bill_id, society_id)
        before = audit_trail.snapshot(existing)
        tombstone = audit_trail.record_deleted(existing.audit_trail, actor, before=before, notes="Bill deleted.")[-1]
        self.audit_service.log(
            AuditEventType.BILL_DELETE,
            actor=actor,
            society_id=society_id,
            entity_type="bill",
            entity_id=bill_id,
            previous_state=existing.to_document(),
            metadata={"auditEntry": tombstone.to_document()},
        )
        self.bill_repo.delete(bill_id, society_id)
        logger.info("Bill %s deleted from society=%s", bill_id, society_id)

    # ---- Scheduled jobs ----

    def recalculate_interest(
        self,
        society_id: str,
        now: datetime | None = None,
        actor: Actor = SYSTEM_ACTOR,
    ) -> list[MaintenanceBill]:
        """Refresh overdue interest and status for every unsettled bill of a society.

        Bills whose values would not change are skipped, and a bill that was
        modified concurrently is left for the next run.
        """
        now = now or _now()
        configs = self.config_service.list_configs(society_id)
        changed: list[MaintenanceBill] = []

        for bill in self.bill_repo.list_unsettled(society_id):
            updated = bill.model_copy(deep=True)
            if now.astimezone(APP_TZ).date() > bill.due_date:
                updated.status = BillStatus.OVERDUE

            if bill.breakdown:
                try:
                    config = config_resolver.resolve(configs, bill.period)
                except ConfigNotFoundError:
                    logger.warning("Interest skipped for bill=%s: no config for period=%s", bill.id, bill.period)
                    config = None
                if config is not None:
                    accrued = interest.accrue(config.interest_rules, bill.due_date, now, bill.interest_principal)
                    updated.interest_amount = accrued.amount or None
                    updated.interest_reason = accrued.reason or None
                    updated.amount = quantize(bill.amount - bill.adjustments_total() + updated.adjustments_total())

            if (
                updated.status == bill.status
                and updated.interest_amount == bill.interest_amount
                and updated.amount == bill.amount
            ):
                continue

            before = audit_trail.snapshot(bill)
            updated.audit_trail = audit_trail.record_updated(
                bill.audit_trail,
                actor,
                before=before,
                after=audit_trail.snapshot(updated),
                notes="Interest recalculated.",
                field="interestAmount",
                at=now,
            )
            try:
                saved = self.bill_repo.update(updated, bill.version)
            except ConflictError:
                logger.warning("Interest recalculation lost a race on bill=%s, skipping", bill.id)
                continue
            self.audit_service.safe_log(
                AuditEventType.BILL_INTEREST_RECALCULATED,
                actor=actor,
                society_id=society_id,
                entity_type="bill",
                entity_id=saved.id,
                previous_state=before,
                new_state=audit_trail.snapshot(saved),
            )
            changed.append(saved)

        logger.info("Interest recalculated: society=%s changed=%d", society_id, len(changed))
        return changed
