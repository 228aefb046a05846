# User value: This file records provider results on the job and serves them back so users see their transcript when it lands.
import logging
from typing import Optional

import requests

from schemas.job_contract import JOB_STATUS_COMPLETED, JOB_STATUS_ERROR
from schemas.requests import WebhookPayload
from services.errors import NotFoundError, ValidationError
from services.webhook_auth import verify_webhook_token
from utils.metrics import incr
from utils.request_id import get_request_id
from utils.stage_logging import log_stage
from utils.status_machine import is_terminal, transition_set

logger = logging.getLogger("api.jobs")


# User value: maps the provider's callback onto the stored job shape users poll for.
def record_from_payload(payload: WebhookPayload) -> dict:
    status = str(payload.status or "").strip()
    if status == JOB_STATUS_COMPLETED:
        return {"status": JOB_STATUS_COMPLETED, "text": payload.text}
    if status == JOB_STATUS_ERROR:
        return {"status": JOB_STATUS_ERROR, "error": payload.error}
    return {"status": status}


class WebhookReceiver:
    """Finalizes jobs from provider callbacks.

    Deliveries are not deduplicated: a second terminal payload for the same
    job replaces the first (last writer wins) and is only logged.
    """

    def __init__(self, *, store, webhook_secret: str = "", transcriber=None, fetch_missing_text: bool = True):
        self.store = store
        self.webhook_secret = webhook_secret
        self.transcriber = transcriber
        self.fetch_missing_text = fetch_missing_text

    def _fill_missing_text(self, job_id: str, payload: WebhookPayload) -> WebhookPayload:
        # Provider callbacks carry only {transcript_id, status}; text or error comes from a fetch.
        if payload.status == JOB_STATUS_COMPLETED:
            field = "text"
        elif payload.status == JOB_STATUS_ERROR:
            field = "error"
        else:
            return payload
        if getattr(payload, field) is not None:
            return payload
        if not (self.fetch_missing_text and self.transcriber and payload.transcript_id):
            return payload
        try:
            transcript = self.transcriber.fetch_transcript(payload.transcript_id)
        except (requests.RequestException, ValueError) as exc:
            log_stage(
                job_id=job_id,
                stage="WEBHOOK_TEXT_FETCH",
                event="FAILED",
                transcript_id=payload.transcript_id,
                error=f"{exc.__class__.__name__}: {exc}",
            )
            return payload
        return payload.model_copy(update={field: getattr(transcript, field)})

    def handle(self, job_id: Optional[str], payload: WebhookPayload, token: Optional[str] = None) -> dict:
        job_id = str(job_id or "").strip()
        if not job_id:
            raise ValidationError("Job ID required", message="Job ID required")

        verify_webhook_token(self.webhook_secret, job_id, token)

        if not str(payload.status or "").strip():
            log_stage(
                job_id=job_id,
                stage="WEBHOOK",
                event="SKIPPED",
                transcript_id=payload.transcript_id,
                error="delivery has no status",
            )
            return {"received": True}

        payload = self._fill_missing_text(job_id, payload)
        record = record_from_payload(payload)
        current, target = transition_set(
            self.store,
            job_id=job_id,
            record=record,
            context="webhook",
            request_id=get_request_id() or "",
        )
        if is_terminal(current):
            incr("transcript_terminal_overwrites_total")

        incr("transcript_webhook_events_total", status=target or "unknown")
        log_stage(
            job_id=job_id,
            stage="WEBHOOK",
            event="COMPLETED",
            previous_status=current,
            status=target,
            transcript_id=payload.transcript_id,
        )
        return {"received": True}


# User value: loads the latest job state so users see exactly where their transcript stands.
def get_job_status(store, job_id: Optional[str]) -> dict:
    job_id = str(job_id or "").strip()
    if not job_id:
        raise ValidationError("Job ID required", message="Job ID required")

    data = store.get(job_id)
    if not data:
        raise NotFoundError("Job not found")
    return data
