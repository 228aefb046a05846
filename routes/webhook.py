# User value: This endpoint receives the provider's "transcript ready" callback so users' jobs finish.
import json

from fastapi import APIRouter, Depends, Header, Query, Request
from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool

from schemas.job_contract import JOB_ID_QUERY_PARAM, WEBHOOK_TOKEN_HEADER
from schemas.requests import WebhookPayload
from schemas.responses import ErrorResponse, WebhookAck
from services.dependencies import get_webhook_receiver
from services.errors import ValidationError
from utils.stage_logging import log_stage

router = APIRouter()


@router.post(
    "/webhook",
    response_model=WebhookAck,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
# User value: acknowledges every delivery so the provider does not retry things it cannot fix.
async def webhook(
    request: Request,
    job_id: str | None = Query(default=None, alias=JOB_ID_QUERY_PARAM),
    token: str | None = Header(default=None, alias=WEBHOOK_TOKEN_HEADER),
    receiver=Depends(get_webhook_receiver),
):
    if not str(job_id or "").strip():
        raise ValidationError("Job ID required", message="Job ID required")

    raw = await request.body()
    try:
        payload = WebhookPayload.model_validate(json.loads(raw or b"{}"))
    except (ValueError, PydanticValidationError) as exc:
        # Unreadable deliveries are acknowledged and dropped.
        log_stage(job_id=job_id, stage="WEBHOOK", event="SKIPPED", error=f"unreadable payload: {exc.__class__.__name__}")
        return WebhookAck()

    return await run_in_threadpool(receiver.handle, job_id, payload, token)
