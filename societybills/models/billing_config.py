from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal

from pydantic import Field, model_validator

from societybills.models.base import DocumentModel, Money
from societybills.models.bill import AuditEntry


class RateType(str, Enum):
    PERCENT = "percent"
    FIXED = "fixed"


class ChargeType(str, Enum):
    RECURRING = "recurring"
    ONE_TIME = "one-time"


class Compounding(str, Enum):
    DAILY = "daily"
    MONTHLY = "monthly"
    NONE = "none"


class Category(DocumentModel):
    key: str
    label: str
    per_flat_type: dict[str, Money] = {}
    charge_type: ChargeType = ChargeType.RECURRING
    is_mandatory: bool = True
    description: str | None = None


class DiscountCriteria(DocumentModel):
    before_days: int


class EarlyPaymentDiscount(DocumentModel):
    type: Literal["auto"] = "auto"
    key: Literal["earlyPayment"] = "earlyPayment"
    label: str = "Early payment discount"
    criteria: DiscountCriteria
    rate_type: RateType = RateType.FIXED
    amount: Decimal


class ManualDiscount(DocumentModel):
    """Documented discount policy; applied per flat by an admin, never automatically."""

    type: Literal["manual"] = "manual"
    key: Literal["manual"] = "manual"
    label: str
    rate_type: RateType = RateType.FIXED
    amount: Decimal = Decimal("0")


DiscountRule = Annotated[EarlyPaymentDiscount | ManualDiscount, Field(discriminator="key")]


class LatePaymentPenalty(DocumentModel):
    enabled: bool = False
    days_after_due: int = 0
    rate_type: RateType = RateType.FIXED
    amount: Decimal = Decimal("0")
    max_amount: Money | None = None
    description: str | None = None


class PenaltyRules(DocumentModel):
    late_payment: LatePaymentPenalty | None = None


class InterestRules(DocumentModel):
    enabled: bool = False
    days_after_due: int = 0
    rate_type: RateType = RateType.PERCENT
    amount: Decimal = Decimal("0")
    compounding: Compounding = Compounding.MONTHLY
    max_amount: Money | None = None
    per_category: bool = False
    description: str = ""


class BillingConfig(DocumentModel):
    id: str = ""
    society_id: str = ""
    effective_from: date
    flat_types: list[str] = []
    categories: list[Category] = []
    discount_rules: list[DiscountRule] = []
    penalty_rules: PenaltyRules | None = None
    interest_rules: InterestRules | None = None
    updated_at: datetime | None = None
    audit_trail: list[AuditEntry] = []

    @model_validator(mode="after")
    def _check_categories(self) -> BillingConfig:
        keys = [cat.key for cat in self.categories]
        if any(not key.strip() for key in keys):
            raise ValueError("Category key required")
        if len(set(keys)) != len(keys):
            raise ValueError("Category keys must be unique")
        return self

    def missing_rates(self) -> list[tuple[str, str]]:
        """(category label, flat type) pairs with no rate among ``flat_types``."""
        return [
            (cat.label, flat_type)
            for cat in self.categories
            for flat_type in self.flat_types
            if flat_type not in cat.per_flat_type
        ]
