# User value: This file flags suspicious job status changes so operators can spot duplicate provider callbacks.
import logging
from typing import Optional

from schemas.job_contract import JOB_STATUS_PENDING, TERMINAL_STATUSES

logger = logging.getLogger("api.status_machine")

_TERMINAL = set(TERMINAL_STATUSES)


# User value: This step keeps status comparisons stable regardless of provider casing.
def _norm(status: Optional[str]) -> Optional[str]:
    if status is None:
        return None
    s = str(status).strip().lower()
    return s or None


def is_terminal(status: Optional[str]) -> bool:
    return _norm(status) in _TERMINAL


# User value: This step documents which moves a job is expected to make on its way to a result.
def is_expected_transition(current: Optional[str], target: Optional[str]) -> bool:
    current_n = _norm(current)
    target_n = _norm(target)
    if current_n is None:
        return target_n == JOB_STATUS_PENDING
    if current_n in _TERMINAL:
        return False
    return target_n is not None


# User value: writes the new record even when it replaces a final one (last writer wins) but leaves a trail.
def transition_set(store, *, job_id: str, record: dict, context: str, request_id: str = "") -> tuple[Optional[str], Optional[str]]:
    current_record = store.get(job_id) or {}
    current = _norm(current_record.get("status"))
    target = _norm(record.get("status"))

    if current in _TERMINAL:
        if current == target and current_record == record:
            logger.info(
                "status_transition_idempotent_terminal context=%s job_id=%s status=%s request_id=%s",
                context,
                job_id,
                target,
                request_id,
            )
        else:
            logger.warning(
                "status_transition_overwrites_terminal context=%s job_id=%s current=%s target=%s request_id=%s",
                context,
                job_id,
                current,
                target,
                request_id,
            )
    elif not is_expected_transition(current, target):
        logger.warning(
            "status_transition_unexpected context=%s job_id=%s current=%s target=%s request_id=%s",
            context,
            job_id,
            current,
            target,
            request_id,
        )

    store.set(job_id, record)
    return current, target
