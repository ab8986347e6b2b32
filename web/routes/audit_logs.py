from __future__ import annotations

import logging

from fastapi import APIRouter, Request

from web.deps import get_actor, get_audit_service
from web.routes.notifications import _limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/audit-logs")


@router.get("")
async def audit_log_list(request: Request):
    actor = get_actor(request)
    society_id = request.query_params.get("societyId", "")
    entity_type = request.query_params.get("entityType") or None
    entity_id = request.query_params.get("entityId") or None
    logger.info("GET /api/audit-logs society=%s entity=%s/%s", society_id, entity_type, entity_id)
    logs = get_audit_service(request).list_logs(
        society_id, actor, entity_type=entity_type, entity_id=entity_id, limit=_limit(request, default=50)
    )
    return {"auditLogs": [log.to_document() for log in logs]}
