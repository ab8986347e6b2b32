from societybills.repositories.base import (
    AuditLogRepository,
    BillingConfigRepository,
    BillRepository,
)


def get_bill_repository() -> BillRepository:
    from societybills.db import get_connection
    from societybills.repositories.sqlalchemy import SQLAlchemyBillRepository

    return SQLAlchemyBillRepository(get_connection())


def get_billing_config_repository() -> BillingConfigRepository:
    from societybills.db import get_connection
    from societybills.repositories.sqlalchemy import SQLAlchemyBillingConfigRepository

    return SQLAlchemyBillingConfigRepository(get_connection())


def get_audit_log_repository() -> AuditLogRepository:
    from societybills.db import get_connection
    from societybills.repositories.sqlalchemy import SQLAlchemyAuditLogRepository

    return SQLAlchemyAuditLogRepository(get_connection())

