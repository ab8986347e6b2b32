"""Per-flat charge computation.

The calculation is an ordered pipeline of pure steps over an immutable
``ChargeResult``. Later steps read totals produced by earlier ones, so the
order in ``PIPELINE`` is part of the contract: base breakdown, discounts,
waivers, penalty, ad-hoc charges.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from decimal import Decimal

from societybills.constants import ZERO, quantize, start_of_day
from societybills.exceptions import MissingRateError, ValidationError
from societybills.models.billing_config import BillingConfig, EarlyPaymentDiscount, RateType
from societybills.models.requests import FlatRequest

DEFAULT_PENALTY_REASON = "Late payment"


@dataclass(frozen=True)
class ChargeContext:
    config: BillingConfig
    flat: FlatRequest
    due_date: date
    now: datetime


@dataclass(frozen=True)
class ChargeResult:
    breakdown: dict[str, Decimal] = field(default_factory=dict)
    total: Decimal = ZERO
    discount_amount: Decimal = ZERO
    discount_reasons: tuple[str, ...] = ()
    waiver_amount: Decimal = ZERO
    waiver_reasons: tuple[str, ...] = ()
    penalty_amount: Decimal = ZERO
    penalty_reasons: tuple[str, ...] = ()
    ad_hoc_total: Decimal = ZERO

    @property
    def discount_reason(self) -> str:
        return "; ".join(self.discount_reasons)

    @property
    def waiver_reason(self) -> str:
        return "; ".join(self.waiver_reasons)

    @property
    def penalty_reason(self) -> str:
        return "; ".join(self.penalty_reasons)

    @property
    def interest_principal(self) -> Decimal:
        """Base for overdue interest: penalty and ad-hoc charges are excluded."""
        return max(ZERO, self.total - self.discount_amount - self.waiver_amount)


Step = Callable[[ChargeResult, ChargeContext], ChargeResult]


def _rate(rate_type: RateType, amount: Decimal, total: Decimal) -> Decimal:
    if rate_type == RateType.PERCENT:
        return total * amount / 100
    return amount


def days_until(due_date: date, now: datetime) -> int:
    """Whole days from ``now`` to the due date, rounded up."""
    seconds = (start_of_day(due_date) - now).total_seconds()
    return math.ceil(seconds / 86400)


def base_breakdown(acc: ChargeResult, ctx: ChargeContext) -> ChargeResult:
    flat_type = ctx.flat.flat_type
    if not flat_type:
        raise ValidationError(f"Missing flatType for flat {ctx.flat.flat_number}")
    breakdown: dict[str, Decimal] = {}
    for category in ctx.config.categories:
        rate = category.per_flat_type.get(flat_type)
        if rate is None:
            raise MissingRateError(category.label, flat_type)
        breakdown[category.key] = rate
    return replace(acc, breakdown=breakdown, total=sum(breakdown.values(), ZERO))


def apply_discounts(acc: ChargeResult, ctx: ChargeContext) -> ChargeResult:
    amount = ZERO
    reasons: list[str] = []
    for rule in ctx.config.discount_rules:
        if not isinstance(rule, EarlyPaymentDiscount):
            continue
        if days_until(ctx.due_date, ctx.now) >= rule.criteria.before_days:
            amount += quantize(_rate(rule.rate_type, rule.amount, acc.total))
            reasons.append(rule.label)
    if ctx.flat.discount_amount:
        amount += ctx.flat.discount_amount
        if ctx.flat.discount_reason:
            reasons.append(ctx.flat.discount_reason)
    return replace(acc, discount_amount=amount, discount_reasons=tuple(reasons))


def apply_waivers(acc: ChargeResult, ctx: ChargeContext) -> ChargeResult:
    if not ctx.flat.waiver_amount:
        return acc
    reasons = (ctx.flat.waiver_reason,) if ctx.flat.waiver_reason else ()
    return replace(acc, waiver_amount=ctx.flat.waiver_amount, waiver_reasons=reasons)


def apply_penalty(acc: ChargeResult, ctx: ChargeContext) -> ChargeResult:
    amount = ZERO
    reasons: list[str] = []
    rules = ctx.config.penalty_rules
    late = rules.late_payment if rules is not None else None
    if late is not None and late.enabled:
        penalty_start = start_of_day(ctx.due_date) + timedelta(days=late.days_after_due)
        if ctx.now > penalty_start:
            amount = quantize(_rate(late.rate_type, late.amount, acc.total))
            if late.max_amount:
                amount = min(amount, late.max_amount)
            reasons.append(late.description or DEFAULT_PENALTY_REASON)
    if ctx.flat.penalty_amount:
        amount += ctx.flat.penalty_amount
        if ctx.flat.penalty_reason:
            reasons.append(ctx.flat.penalty_reason)
    return replace(acc, penalty_amount=amount, penalty_reasons=tuple(reasons))


def apply_ad_hoc(acc: ChargeResult, ctx: ChargeContext) -> ChargeResult:
    total = sum((charge.amount for charge in ctx.flat.ad_hoc_charges), ZERO)
    return replace(acc, ad_hoc_total=total)


PIPELINE: tuple[Step, ...] = (
    base_breakdown,
    apply_discounts,
    apply_waivers,
    apply_penalty,
    apply_ad_hoc,
)


def compute(config: BillingConfig, flat: FlatRequest, due_date: date, now: datetime) -> ChargeResult:
    ctx = ChargeContext(config=config, flat=flat, due_date=due_date, now=now)
    acc = ChargeResult()
    for step in PIPELINE:
        acc = step(acc, ctx)
    return acc
