from fastapi import APIRouter, Depends, HTTPException

from services.dependencies import get_job_store

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health(store=Depends(get_job_store)):
    if not store.ping():
        raise HTTPException(
            status_code=503,
            detail={"error_code": "INFRA_JOB_STORE", "error_message": "Job store unreachable"},
        )
    return {
        "status": "OK",
        "job_store": "connected",
    }
