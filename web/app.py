from __future__ import annotations

import logging
import traceback
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from societybills.db import initialize_db
from societybills.exceptions import (
    ConfigNotFoundError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    PersistenceError,
    SocietyBillsError,
    ValidationError,
)
from societybills.logging import configure_logging, reconfigure
from web.deps import DBConnectionMiddleware
from web.routes.audit_logs import router as audit_logs_router
from web.routes.bills import router as bills_router
from web.routes.config import router as config_router
from web.routes.notifications import router as notifications_router

configure_logging()
logger = logging.getLogger(__name__)

# Most specific first; subclasses must precede their bases.
ERROR_STATUS: list[tuple[type[SocietyBillsError], int]] = [
    (ValidationError, 400),
    (ConfigNotFoundError, 400),
    (PermissionDeniedError, 403),
    (NotFoundError, 404),
    (InvalidTransitionError, 409),
    (ConflictError, 409),
    (PersistenceError, 500),
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    initialize_db()
    # Alembic's fileConfig replaces the root handlers
    reconfigure()
    logger.info("Application started")
    yield


app = FastAPI(docs_url=None, redoc_url=None, lifespan=lifespan)

app.add_middleware(DBConnectionMiddleware)

app.include_router(bills_router)
app.include_router(config_router)
app.include_router(notifications_router)
app.include_router(audit_logs_router)


def status_for(exc: SocietyBillsError) -> int:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return 500


@app.exception_handler(SocietyBillsError)
async def domain_exception_handler(request: Request, exc: SocietyBillsError):
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
        return JSONResponse({"error": "Internal Server Error"}, status_code=status_code)
    logger.warning("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
    return JSONResponse({"error": str(exc)}, status_code=status_code)


@app.exception_handler(PydanticValidationError)
async def body_validation_handler(request: Request, exc: PydanticValidationError):
    logger.warning("Invalid body on %s %s: %d error(s)", request.method, request.url.path, exc.error_count())
    return JSONResponse(
        {"error": "Invalid request body", "details": exc.errors(include_url=False, include_context=False, include_input=False)},
        status_code=400,
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled exception on %s %s:\n%s",
        request.method,
        request.url.path,
        traceback.format_exc(),
    )
    return JSONResponse({"error": "Internal Server Error"}, status_code=500)


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}
