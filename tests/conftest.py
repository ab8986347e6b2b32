"""Root conftest: in-memory SQLite engine and fixtures for the full schema."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy import Connection, create_engine, text
from sqlalchemy.engine import Engine

from societybills.constants import APP_TZ
from societybills.models.actor import Actor
from societybills.models.bill import ApprovalEntry, ApprovalStatus, BillStatus, MaintenanceBill
from societybills.models.billing_config import (
    BillingConfig,
    Category,
    DiscountCriteria,
    EarlyPaymentDiscount,
    InterestRules,
    LatePaymentPenalty,
    PenaltyRules,
    RateType,
)

# Matches Alembic head: 3f9c1a7d2b40 (initial schema)
SCHEMA_DDL = """
CREATE TABLE maintenance_bills (
    id VARCHAR(26) NOT NULL,
    society_id VARCHAR(64) NOT NULL,
    user_id VARCHAR(64),
    flat_number VARCHAR(32) NOT NULL,
    period VARCHAR(7) NOT NULL,
    status VARCHAR(16) NOT NULL,
    approval_status VARCHAR(32) NOT NULL,
    generated_at VARCHAR(40) NOT NULL,
    version INTEGER NOT NULL DEFAULT 1,
    document TEXT NOT NULL,
    PRIMARY KEY (id, society_id)
);

CREATE TABLE billing_configs (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    id VARCHAR(26) NOT NULL UNIQUE,
    society_id VARCHAR(64) NOT NULL,
    effective_from VARCHAR(10) NOT NULL,
    document TEXT NOT NULL,
    created_at VARCHAR(40) NOT NULL
);

CREATE UNIQUE INDEX ix_billing_configs_society ON billing_configs (society_id, effective_from);

CREATE TABLE audit_logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid VARCHAR(26) NOT NULL UNIQUE,
    event_type VARCHAR(50) NOT NULL,
    actor_id VARCHAR(64) NOT NULL,
    actor_name VARCHAR(255) NOT NULL DEFAULT '',
    society_id VARCHAR(64) NOT NULL DEFAULT '',
    entity_type VARCHAR(50) NOT NULL DEFAULT '',
    entity_id VARCHAR(64) NOT NULL DEFAULT '',
    previous_state TEXT,
    new_state TEXT,
    metadata TEXT NOT NULL DEFAULT '{}',
    created_at VARCHAR(40) NOT NULL
);

CREATE TABLE notifications (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    uuid VARCHAR(26) NOT NULL UNIQUE,
    audience VARCHAR(16) NOT NULL,
    user_id VARCHAR(64),
    society_id VARCHAR(64),
    type VARCHAR(32) NOT NULL,
    title VARCHAR(255) NOT NULL,
    message TEXT NOT NULL,
    link VARCHAR(255) NOT NULL DEFAULT '',
    is_read INTEGER NOT NULL DEFAULT 0,
    created_at VARCHAR(40) NOT NULL
);
"""

ADMIN = Actor(id="admin-1", name="Asha Admin", role="society_admin")
EDITOR = Actor(id="editor-1", name="Ravi", role="admin")
RESIDENT = Actor(id="resident-1", name="Meera", role="owner")


def apply_schema(conn: Connection) -> None:
    for statement in SCHEMA_DDL.strip().split(";"):
        stmt = statement.strip()
        if stmt:
            conn.execute(text(stmt))
    conn.commit()


@pytest.fixture()
def db_engine() -> Engine:
    return create_engine("sqlite:///:memory:")


@pytest.fixture()
def db_connection(db_engine: Engine) -> Connection:
    conn = db_engine.connect()
    apply_schema(conn)
    yield conn
    conn.close()


def _sample_config(**overrides) -> BillingConfig:
    defaults = dict(
        society_id="soc-1",
        effective_from=date(2024, 1, 1),
        flat_types=["1BHK", "2BHK"],
        categories=[
            Category(
                key="maintenance",
                label="Maintenance",
                per_flat_type={"1BHK": Decimal("800"), "2BHK": Decimal("1000")},
            ),
            Category(
                key="sinkingFund",
                label="Sinking Fund",
                per_flat_type={"1BHK": Decimal("150"), "2BHK": Decimal("200")},
            ),
        ],
        discount_rules=[],
        penalty_rules=PenaltyRules(late_payment=LatePaymentPenalty(enabled=False)),
        interest_rules=InterestRules(enabled=False),
    )
    defaults.update(overrides)
    return BillingConfig(**defaults)


def _early_payment(before_days: int = 10, rate_type: RateType = RateType.PERCENT, amount: str = "5"):
    return EarlyPaymentDiscount(
        label="Early bird",
        criteria=DiscountCriteria(before_days=before_days),
        rate_type=rate_type,
        amount=Decimal(amount),
    )


def _sample_bill(**overrides) -> MaintenanceBill:
    generated = datetime(2024, 3, 1, 9, 0, tzinfo=APP_TZ)
    defaults = dict(
        society_id="soc-1",
        flat_number="A-101",
        user_id="user-1",
        flat_type="2BHK",
        period="2024-03",
        amount=Decimal("1200.00"),
        due_date=date(2024, 3, 15),
        status=BillStatus.UNPAID,
        generated_at=generated,
        breakdown={"maintenance": Decimal("1000"), "sinkingFund": Decimal("200")},
        approval_status=ApprovalStatus.DRAFT,
        approval_history=[ApprovalEntry(status=ApprovalStatus.DRAFT, changed_by="admin-1", changed_at=generated)],
    )
    defaults.update(overrides)
    return MaintenanceBill(**defaults)


@pytest.fixture()
def sample_config():
    return _sample_config


@pytest.fixture()
def early_payment():
    return _early_payment


@pytest.fixture()
def sample_bill():
    return _sample_bill
