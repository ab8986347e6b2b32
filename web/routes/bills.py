from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from societybills.engine import workflow
from societybills.exceptions import NotFoundError, ValidationError
from societybills.models.requests import (
    BillFilters,
    CreateBillRequest,
    GenerateBillsRequest,
    TransitionRequest,
    UpdateBillRequest,
)
from web.deps import get_actor, get_bill_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/billing/bills")


async def _json_body(request: Request) -> dict:
    try:
        body = await request.json()
    except ValueError as exc:
        raise ValidationError("Request body must be valid JSON") from exc
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


@router.get("")
async def bill_list(request: Request):
    get_actor(request)
    society_id = request.query_params.get("societyId", "")
    filters = BillFilters(
        user_id=request.query_params.get("userId") or None,
        flat_number=request.query_params.get("flatNumber") or None,
        period=request.query_params.get("period") or None,
    )
    logger.info("GET /api/billing/bills society=%s", society_id)
    bills = get_bill_service(request).list_bills(society_id, filters)
    return {"bills": [bill.to_document() for bill in bills]}


@router.post("")
async def bill_create(request: Request):
    actor = get_actor(request)
    body = await _json_body(request)
    service = get_bill_service(request)

    if body.pop("action", None) == "generate":
        generate_request = GenerateBillsRequest.model_validate(body)
        logger.info("POST /api/billing/bills generate society=%s", generate_request.society_id)
        result = service.generate_bills(generate_request, actor)
        return JSONResponse(
            {
                "bills": [bill.to_document() for bill in result.bills],
                "failures": [{"period": failure.period, "error": str(failure.error)} for failure in result.failures],
            },
            status_code=201,
        )

    create_request = CreateBillRequest.model_validate(body)
    logger.info("POST /api/billing/bills single society=%s flat=%s", create_request.society_id, create_request.flat_number)
    bill = service.create_single_bill(
        create_request.society_id,
        create_request.flat_number,
        create_request.user_id,
        create_request.period,
        create_request.amount,
        create_request.due_date,
        create_request.notes,
        actor,
    )
    return JSONResponse({"bill": bill.to_document()}, status_code=201)


@router.get("/{bill_id}")
async def bill_detail(request: Request, bill_id: str):
    get_actor(request)
    society_id = request.query_params.get("societyId", "")
    if not society_id:
        raise ValidationError("societyId is required")
    logger.info("GET /api/billing/bills/%s society=%s", bill_id, society_id)
    bill = get_bill_service(request).get_bill(bill_id, society_id)
    if bill is None:
        raise NotFoundError("Bill not found")
    return {
        "bill": bill.to_document(),
        "allowedTransitions": [status.value for status in workflow.allowed_transitions(bill.approval_status)],
    }


@router.put("/{bill_id}")
async def bill_update(request: Request, bill_id: str):
    actor = get_actor(request)
    update_request = UpdateBillRequest.model_validate(await _json_body(request))
    logger.info("PUT /api/billing/bills/%s version=%s", bill_id, update_request.version)
    bill = get_bill_service(request).update_bill(
        bill_id, update_request.society_id, update_request, update_request.version, actor
    )
    return {"bill": bill.to_document()}


@router.post("/{bill_id}/transitions")
async def bill_transition(request: Request, bill_id: str):
    actor = get_actor(request)
    transition_request = TransitionRequest.model_validate(await _json_body(request))
    logger.info("POST /api/billing/bills/%s/transitions to=%s", bill_id, transition_request.to_status.value)
    bill = get_bill_service(request).transition(
        bill_id,
        transition_request.society_id,
        transition_request.to_status,
        transition_request.version,
        actor,
        transition_request.notes,
    )
    return {"bill": bill.to_document()}


@router.delete("/{bill_id}")
async def bill_delete(request: Request, bill_id: str):
    actor = get_actor(request)
    society_id = request.query_params.get("societyId", "")
    if not society_id:
        raise ValidationError("societyId is required")
    logger.info("DELETE /api/billing/bills/%s society=%s", bill_id, society_id)
    get_bill_service(request).delete_bill(bill_id, society_id, actor)
    return {"success": True}
