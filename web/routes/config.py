from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from societybills.exceptions import ValidationError
from societybills.models.billing_config import BillingConfig
from web.deps import get_actor, get_billing_config_service
from web.routes.bills import _json_body

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/billing/config")


@router.get("")
async def config_get(request: Request):
    get_actor(request)
    society_id = request.query_params.get("societyId", "")
    if not society_id:
        raise ValidationError("societyId is required")
    period = request.query_params.get("period") or None
    logger.info("GET /api/billing/config society=%s period=%s", society_id, period)
    config = get_billing_config_service(request).get_config(society_id, period)
    return {"config": config.to_document() if config is not None else None}


@router.post("")
async def config_save(request: Request):
    actor = get_actor(request)
    config = BillingConfig.model_validate(await _json_body(request))
    logger.info("POST /api/billing/config society=%s effective_from=%s", config.society_id, config.effective_from)
    created = get_billing_config_service(request).save_config(config.society_id, config, actor)
    return JSONResponse({"config": created.to_document()}, status_code=201)
