# User value: This endpoint lets users (and the poller) check where their transcript job stands.
from fastapi import APIRouter, Depends, Query

from schemas.job_contract import JOB_ID_QUERY_PARAM
from schemas.responses import ErrorResponse, JobStatusResponse
from services.dependencies import get_job_store
from services.jobs import get_job_status
from utils.stage_logging import log_stage

router = APIRouter()


@router.get(
    "/check-status",
    response_model=JobStatusResponse,
    response_model_exclude_unset=True,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
# User value: loads latest transcript job data so users see current status.
def check_status(
    job_id: str | None = Query(default=None, alias=JOB_ID_QUERY_PARAM),
    store=Depends(get_job_store),
):
    data = get_job_status(store, job_id)
    log_stage(job_id=job_id, stage="STATUS_READ", event="COMPLETED", status=data.get("status"))
    return data
