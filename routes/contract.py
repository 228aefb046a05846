# User value: This file publishes the job status vocabulary so clients poll against a known contract.
from fastapi import APIRouter

from schemas.job_contract import (
    CONTRACT_VERSION,
    JOB_STATUSES,
    TERMINAL_STATUSES,
    PROVIDER_PROGRESS_STATUSES,
    CANONICAL_FIELDS,
)
from services.feature_flags import is_fast_path_enabled, is_webhook_text_fetch_enabled

router = APIRouter()


@router.get("/contract/job-status")
# User value: keeps job/status fields consistent across the browser and CLI clients.
def job_status_contract():
    return {
        "contract_version": CONTRACT_VERSION,
        "job_statuses": list(JOB_STATUSES),
        "terminal_statuses": list(TERMINAL_STATUSES),
        "provider_progress_statuses": list(PROVIDER_PROGRESS_STATUSES),
        "canonical_fields": list(CANONICAL_FIELDS),
        "capabilities": {
            "fast_path_enabled": is_fast_path_enabled(),
            "webhook_text_fetch_enabled": is_webhook_text_fetch_enabled(),
        },
    }
