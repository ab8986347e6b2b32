from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from starlette.types import ASGIApp, Receive, Scope, Send

from societybills.db import get_engine
from societybills.models.actor import Actor
from societybills.notifications.dispatch import NotificationDispatcher
from societybills.notifications.factory import get_notifier
from societybills.repositories.sqlalchemy import (
    SQLAlchemyAuditLogRepository,
    SQLAlchemyBillingConfigRepository,
    SQLAlchemyBillRepository,
    SQLAlchemyNotificationRepository,
)
from societybills.services.audit_service import AuditService
from societybills.services.bill_service import BillService
from societybills.services.billing_config_service import BillingConfigService
from societybills.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

ACTOR_ID_HEADER = "X-Actor-Id"
ACTOR_NAME_HEADER = "X-Actor-Name"
ACTOR_ROLE_HEADER = "X-Actor-Role"


class DBConnectionMiddleware:
    """Pure ASGI middleware that closes the per-request DB connection."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        request.state.db_conn = None
        try:
            await self.app(scope, receive, send)
        finally:
            conn = getattr(request.state, "db_conn", None)
            if conn is not None:
                conn.close()
                logger.debug("DB connection closed for %s %s", request.method, request.url.path)


def _get_conn(request: Request):
    """Lazy per-request connection, created on first use and closed by the middleware."""
    if getattr(request.state, "db_conn", None) is None:
        logger.debug("Creating DB connection for %s %s", request.method, request.url.path)
        request.state.db_conn = get_engine().connect()
    return request.state.db_conn


def get_actor(request: Request) -> Actor:
    actor_id = request.headers.get(ACTOR_ID_HEADER, "").strip()
    if not actor_id:
        logger.info("Rejected %s %s: no %s header", request.method, request.url.path, ACTOR_ID_HEADER)
        raise HTTPException(status_code=401, detail="Unauthorized")
    return Actor(
        id=actor_id,
        name=request.headers.get(ACTOR_NAME_HEADER) or None,
        role=request.headers.get(ACTOR_ROLE_HEADER) or None,
    )


def get_dispatcher() -> NotificationDispatcher:
    return NotificationDispatcher(get_notifier(get_engine()))


def get_audit_service(request: Request) -> AuditService:
    return AuditService(SQLAlchemyAuditLogRepository(_get_conn(request)))


def get_billing_config_service(request: Request) -> BillingConfigService:
    return BillingConfigService(
        SQLAlchemyBillingConfigRepository(_get_conn(request)),
        get_audit_service(request),
        get_dispatcher(),
    )


def get_bill_service(request: Request) -> BillService:
    conn = _get_conn(request)
    audit_service = AuditService(SQLAlchemyAuditLogRepository(conn))
    dispatcher = get_dispatcher()
    return BillService(
        SQLAlchemyBillRepository(conn),
        BillingConfigService(SQLAlchemyBillingConfigRepository(conn), audit_service, dispatcher),
        audit_service,
        dispatcher,
    )


def get_notification_service(request: Request) -> NotificationService:
    return NotificationService(SQLAlchemyNotificationRepository(_get_conn(request)))
