"""
Cron job endpoints.

Called by pg_cron (``net.http_post``) or by an operator. Every response,
including errors and pre-flight answers, carries the CORS headers, and
every failure is turned into ``{error, timestamp}`` with status 500.
"""
from typing import Any, Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from marketplace.auth import is_authorized
from marketplace.config import Settings
from marketplace.db import get_supabase
from marketplace.errors import ERROR_UNAUTHORIZED, MarketplaceError, error_message
from marketplace.logging import get_logger, sanitize_string_for_logging
from marketplace.models import (
    CleanupResponse,
    CronSuccessResponse,
    ErrorResponse,
    RegistrationResponse,
)
from marketplace.observability import ErrorReporter
from marketplace.repositories import ConversationRepository, OrderRepository
from marketplace.scheduling import PgCronSchedulerClient
from marketplace.services import (
    ConversationCleanupWorker,
    ExpirationWorker,
    SchedulerRegistrar,
    default_jobs,
)

logger = get_logger(__name__)

router = APIRouter(tags=["cron"])

CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": ", ".join(CORS_ALLOW_HEADERS),
}


# ==================== DEPENDENCIES ====================

def get_settings() -> Settings:
    return Settings.from_env()


def get_error_reporter() -> ErrorReporter:
    """Fresh reporter for every request."""
    return ErrorReporter()


# ==================== HELPERS ====================

def _json(model: BaseModel, status_code: int = 200) -> JSONResponse:
    return JSONResponse(model.model_dump(), status_code=status_code, headers=CORS_HEADERS)


def _preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


def _unauthorized(authorization: Optional[str], settings: Settings) -> Optional[JSONResponse]:
    if is_authorized(authorization, settings):
        return None
    return _json(ErrorResponse(error=ERROR_UNAUTHORIZED), status_code=401)


def _failure(name: str, error: Exception, reporter: ErrorReporter) -> JSONResponse:
    """500 response. Logs the error unless a service already reported it as fatal."""
    if not any(report.fatal for report in reporter.get_reports()):
        if isinstance(error, MarketplaceError):
            logger.error(f"Error in {name} function: {sanitize_string_for_logging(error_message(error))}")
        else:
            logger.exception(f"Unexpected error in {name} function")
    return _json(ErrorResponse(error=error_message(error)), status_code=500)


async def _read_body(request: Request) -> dict[str, Any]:
    """Optional JSON body; anything that is not a JSON object counts as empty."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


# ==================== EXPIRE ORDERS ====================

@router.options("/expire-orders")
async def expire_orders_preflight() -> Response:
    return _preflight()


@router.post("/expire-orders")
async def expire_orders(
    request: Request,
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
    reporter: ErrorReporter = Depends(get_error_reporter),
):
    """Flag overdue orders as expired. Scheduled hourly."""
    denied = _unauthorized(authorization, settings)
    if denied is not None:
        return denied

    body = await _read_body(request)
    if body:
        logger.info(f"expire-orders request body: {sanitize_string_for_logging(body)}")

    try:
        client = await get_supabase(settings)
        worker = ExpirationWorker(OrderRepository(client), reporter)
        result = await worker.run(scheduled=bool(body.get("scheduled")))
    except Exception as e:
        return _failure("expire-orders", e, reporter)

    return _json(CronSuccessResponse(message=result.message, timestamp=result.timestamp))


# ==================== SETUP CRON ====================

@router.options("/setup-cron")
async def setup_cron_preflight() -> Response:
    return _preflight()


@router.post("/setup-cron")
async def setup_cron(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
    reporter: ErrorReporter = Depends(get_error_reporter),
):
    """Upsert the pg_cron jobs. Run once per deployment or after rotating keys."""
    denied = _unauthorized(authorization, settings)
    if denied is not None:
        return denied

    try:
        jobs = default_jobs(settings)
        client = await get_supabase(settings)
        registrar = SchedulerRegistrar(PgCronSchedulerClient(client), reporter)
        result = await registrar.register(jobs)
    except Exception as e:
        return _failure("setup-cron", e, reporter)

    return _json(
        RegistrationResponse(
            message=result.message,
            schedule=result.schedule,
            jobs=result.jobs,
            timestamp=result.timestamp,
        )
    )


# ==================== CLEANUP CONVERSATIONS ====================

@router.options("/cleanup-deleted-conversations")
async def cleanup_conversations_preflight() -> Response:
    return _preflight()


@router.post("/cleanup-deleted-conversations")
async def cleanup_deleted_conversations(
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
    reporter: ErrorReporter = Depends(get_error_reporter),
):
    """Purge conversations permanently deleted more than the retention period ago."""
    denied = _unauthorized(authorization, settings)
    if denied is not None:
        return denied

    try:
        client = await get_supabase(settings)
        worker = ConversationCleanupWorker(
            ConversationRepository(client),
            reporter,
            retention_days=settings.cleanup_retention_days,
        )
        result = await worker.run()
    except Exception as e:
        return _failure("cleanup-deleted-conversations", e, reporter)

    return _json(
        CleanupResponse(
            message=result.message,
            deleted=result.deleted,
            conversation_ids=result.conversation_ids,
            timestamp=result.timestamp,
        )
    )
