from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal
from zoneinfo import ZoneInfo

from societybills.settings import settings

APP_TZ = ZoneInfo(settings.timezone)

CENTS = Decimal("0.01")
ZERO = Decimal("0")

FREQUENCY_STEPS = {"monthly": 1, "quarterly": 3, "yearly": 12}


def now() -> datetime:
    return datetime.now(APP_TZ)


def start_of_day(day: date) -> datetime:
    """Midnight of ``day`` in the application timezone."""
    return datetime.combine(day, time.min, tzinfo=APP_TZ)


def quantize(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def format_money(amount: Decimal | None) -> str:
    value = quantize(amount or ZERO)
    return f"{settings.currency_symbol}{value:,.2f}"

