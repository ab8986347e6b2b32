"""Billing period helpers. A period is a calendar month written ``YYYY-MM``."""

from __future__ import annotations

import re
from datetime import date

from societybills.constants import FREQUENCY_STEPS
from societybills.exceptions import ValidationError
from societybills.models.requests import PeriodSpec

_PERIOD_RE = re.compile(r"^(\d{4})-(\d{2})$")


def parse_period(period: str) -> date:
    """Return the first day of ``period``."""
    match = _PERIOD_RE.match(period or "")
    if match is None:
        raise ValidationError(f"Invalid period '{period}', expected YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValidationError(f"Invalid period '{period}', month out of range")
    return date(year, month, 1)


def format_period(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def add_months(day: date, months: int) -> date:
    """Shift a first-of-month date by ``months``."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def expand_periods(spec: PeriodSpec) -> list[str]:
    if spec.periods is not None:
        return [format_period(parse_period(p)) for p in spec.periods]
    if spec.period:
        return [format_period(parse_period(spec.period))]
    if spec.frequency and spec.count and spec.start_period:
        step = FREQUENCY_STEPS.get(spec.frequency)
        if step is None:
            raise ValidationError(f"Unsupported frequency '{spec.frequency}'")
        if spec.count < 1:
            raise ValidationError("count must be positive")
        start = parse_period(spec.start_period)
        return [format_period(add_months(start, i * step)) for i in range(spec.count)]
    raise ValidationError("period(s) or frequency/count/startPeriod required")
