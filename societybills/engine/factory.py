from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from ulid import ULID

from societybills.constants import ZERO, quantize
from societybills.engine import audit_trail, charges, config_resolver, interest, workflow
from societybills.exceptions import ConfigNotFoundError, MissingRateError, ValidationError
from societybills.models.actor import Actor
from societybills.models.bill import ApprovalStatus, BillStatus, MaintenanceBill
from societybills.models.billing_config import BillingConfig
from societybills.models.requests import FlatRequest

logger = logging.getLogger(__name__)

GENERATED_NOTE = "Bill generated."
DRAFT_NOTE = "Bill generated as draft."


class PartialBatchPolicy(str, Enum):
    ABORT = "abort"
    KEEP_COMPLETED = "keep_completed"


@dataclass
class PeriodFailure:
    period: str
    error: Exception


@dataclass
class BatchResult:
    bills: list[MaintenanceBill] = field(default_factory=list)
    failures: list[PeriodFailure] = field(default_factory=list)


def _or_none(amount: Decimal) -> Decimal | None:
    return amount if amount != ZERO else None


def validate_flats(config: BillingConfig, flats: list[FlatRequest]) -> None:
    """Every flat needs a flat type, and every category a rate for it."""
    for flat in flats:
        if not flat.flat_type:
            raise ValidationError(f"Missing flatType for flat {flat.flat_number}")
        for category in config.categories:
            if flat.flat_type not in category.per_flat_type:
                raise MissingRateError(category.label, flat.flat_type)


def build_bill(
    config: BillingConfig,
    flat: FlatRequest,
    period: str,
    due_date: date,
    now: datetime,
    actor: Actor,
    society_id: str,
    notes: str | None = None,
) -> MaintenanceBill:
    result = charges.compute(config, flat, due_date, now)
    accrued = interest.accrue(config.interest_rules, due_date, now, result.interest_principal)
    amount = quantize(
        result.total
        - result.discount_amount
        - result.waiver_amount
        + result.penalty_amount
        + result.ad_hoc_total
        + accrued.amount
    )
    return MaintenanceBill(
        id=str(ULID()),
        society_id=society_id,
        flat_number=flat.flat_number,
        user_id=flat.user_id,
        flat_type=flat.flat_type,
        period=period,
        amount=amount,
        due_date=due_date,
        status=BillStatus.UNPAID,
        generated_at=now,
        notes=notes,
        breakdown=result.breakdown,
        discount_amount=_or_none(result.discount_amount),
        discount_reason=result.discount_reason or None,
        waiver_amount=_or_none(result.waiver_amount),
        waiver_reason=result.waiver_reason or None,
        penalty_amount=_or_none(result.penalty_amount),
        penalty_reason=result.penalty_reason or None,
        interest_amount=_or_none(accrued.amount),
        interest_reason=accrued.reason or None,
        ad_hoc_charges=list(flat.ad_hoc_charges) or None,
        approval_status=ApprovalStatus.DRAFT,
        approval_history=workflow.seed_history(actor, now, DRAFT_NOTE),
        audit_trail=audit_trail.record_created([], actor, GENERATED_NOTE, at=now),
    )


def generate(
    config: BillingConfig,
    flats: list[FlatRequest],
    period: str,
    due_date: date,
    now: datetime,
    actor: Actor,
    society_id: str,
    notes: str | None = None,
    workers: int = 1,
) -> list[MaintenanceBill]:
    """Validate all flats against ``config`` and build one bill per flat, in input order."""
    validate_flats(config, flats)

    def _build(flat: FlatRequest) -> MaintenanceBill:
        return build_bill(config, flat, period, due_date, now, actor, society_id, notes)

    if workers <= 1 or len(flats) <= 1:
        bills = [_build(flat) for flat in flats]
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            bills = list(pool.map(_build, flats))
    logger.debug("Built %d bills for society=%s period=%s", len(bills), society_id, period)
    return bills


def generate_batch(
    configs: list[BillingConfig],
    flats: list[FlatRequest],
    periods: list[str],
    due_date: date,
    now: datetime,
    actor: Actor,
    society_id: str,
    notes: str | None = None,
    workers: int = 1,
    policy: PartialBatchPolicy = PartialBatchPolicy.ABORT,
) -> BatchResult:
    """Generate bills for each period with its own effective config."""
    result = BatchResult()
    for period in periods:
        try:
            config = config_resolver.resolve(configs, period)
            bills = generate(config, flats, period, due_date, now, actor, society_id, notes, workers)
        except (ConfigNotFoundError, ValidationError) as exc:
            if policy == PartialBatchPolicy.ABORT:
                raise
            logger.warning("Skipping period=%s for society=%s: %s", period, society_id, exc)
            result.failures.append(PeriodFailure(period=period, error=exc))
            continue
        result.bills.extend(bills)
    return result
