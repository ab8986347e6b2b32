import pytest
from sqlalchemy import Connection

from societybills.repositories.sqlalchemy import (
    SQLAlchemyAuditLogRepository,
    SQLAlchemyBillingConfigRepository,
    SQLAlchemyBillRepository,
    SQLAlchemyNotificationRepository,
)


@pytest.fixture()
def bill_repo(db_connection: Connection) -> SQLAlchemyBillRepository:
    return SQLAlchemyBillRepository(db_connection)


@pytest.fixture()
def config_repo(db_connection: Connection) -> SQLAlchemyBillingConfigRepository:
    return SQLAlchemyBillingConfigRepository(db_connection)


@pytest.fixture()
def audit_repo(db_connection: Connection) -> SQLAlchemyAuditLogRepository:
    return SQLAlchemyAuditLogRepository(db_connection)


@pytest.fixture()
def notification_repo(db_connection: Connection) -> SQLAlchemyNotificationRepository:
    return SQLAlchemyNotificationRepository(db_connection)
