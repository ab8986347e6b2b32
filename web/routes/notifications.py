from __future__ import annotations

import logging

from fastapi import APIRouter, Request

from societybills.exceptions import ValidationError
from web.deps import get_actor, get_notification_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications")


def _limit(request: Request, default: int = 20) -> int:
    raw = request.query_params.get("limit")
    if raw is None:
        return default
    try:
        limit = int(raw)
    except ValueError as exc:
        raise ValidationError("limit must be an integer") from exc
    if not 1 <= limit <= 200:
        raise ValidationError("limit must be between 1 and 200")
    return limit


@router.get("")
async def notification_list(request: Request):
    """The actor's own feed, another user's feed for editors, or the admin feed with ``societyId``."""
    actor = get_actor(request)
    service = get_notification_service(request)
    limit = _limit(request)
    society_id = request.query_params.get("societyId")
    if society_id is not None:
        logger.info("GET /api/notifications admins society=%s", society_id)
        notifications = service.list_for_admins(society_id, actor, limit)
    else:
        user_id = request.query_params.get("userId") or actor.id
        logger.info("GET /api/notifications user=%s", user_id)
        notifications = service.list_for_user(user_id, actor, limit)
    return {"notifications": [notification.to_document() for notification in notifications]}


@router.post("/{notification_id}/read")
async def notification_mark_read(request: Request, notification_id: str):
    actor = get_actor(request)
    logger.info("POST /api/notifications/%s/read", notification_id)
    get_notification_service(request).mark_read(notification_id, actor)
    return {"success": True}
