"""Overdue interest accrual.

Interest starts ``days_after_due`` days after the due date. Elapsed periods
are whole days for daily compounding and calendar months otherwise; a month
counts as started once ``now`` passes the accrual start's day-of-month.
Percent rates repeat per period, compounding onto the base unless
compounding is ``none``. Fixed rates charge ``amount`` per period and ignore
compounding entirely.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal

from societybills.constants import APP_TZ, ZERO, quantize, start_of_day
from societybills.models.billing_config import Compounding, InterestRules, RateType

DEFAULT_INTEREST_REASON = "Overdue interest"


@dataclass(frozen=True)
class InterestResult:
    amount: Decimal = ZERO
    reason: str = ""
    periods_overdue: int = 0


def accrual_start(rules: InterestRules, due_date: date) -> datetime:
    return start_of_day(due_date) + timedelta(days=rules.days_after_due)


def periods_overdue(compounding: Compounding, start: datetime, now: datetime) -> int:
    now = now.astimezone(APP_TZ)
    if compounding == Compounding.DAILY:
        return math.floor((now - start).total_seconds() / 86400)
    months = (now.year - start.year) * 12 + (now.month - start.month)
    if now.day > start.day:
        months += 1
    return months


def accrue(rules: InterestRules | None, due_date: date, now: datetime, principal: Decimal) -> InterestResult:
    if rules is None or not rules.enabled:
        return InterestResult()
    start = accrual_start(rules, due_date)
    if now <= start:
        return InterestResult()

    periods = periods_overdue(rules.compounding, start, now)
    if periods <= 0:
        return InterestResult()

    if rules.rate_type == RateType.PERCENT:
        base = principal
        total = ZERO
        for _ in range(periods):
            interest = base * rules.amount / 100
            total += interest
            if rules.compounding != Compounding.NONE:
                base += interest
    else:
        total = periods * rules.amount

    if rules.max_amount:
        total = min(total, rules.max_amount)

    return InterestResult(
        amount=quantize(total),
        reason=rules.description or DEFAULT_INTEREST_REASON,
        periods_overdue=periods,
    )
