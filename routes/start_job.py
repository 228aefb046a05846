# User value: This endpoint takes a video link and returns either the transcript or a job id to poll.
from fastapi import APIRouter, Body, Depends, Response

from schemas.requests import StartJobRequest
from schemas.responses import CompletedResponse, ErrorResponse, PendingResponse
from services.dependencies import get_orchestrator
from utils.stage_logging import log_stage

router = APIRouter()


@router.post(
    "/start-job",
    response_model=CompletedResponse | PendingResponse,
    responses={
        202: {"model": PendingResponse, "description": "Transcription accepted; poll /check-status"},
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
# User value: gives users captions instantly when possible and a pollable job otherwise.
def start_job(
    response: Response,
    payload: StartJobRequest | None = Body(default=None),
    orchestrator=Depends(get_orchestrator),
):
    url = payload.url if payload else None
    log_stage(job_id=None, stage="START_JOB", event="STARTED", url=url)

    result = orchestrator.start_job(url)
    if isinstance(result, PendingResponse):
        response.status_code = 202
    return result
