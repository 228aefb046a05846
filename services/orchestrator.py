# User value: This file decides between instant captions and paid transcription so users get text as cheaply and quickly as possible.
import logging
import time
from typing import Callable, Union
from urllib.parse import quote

from schemas.job_contract import JOB_ID_PREFIX, JOB_ID_QUERY_PARAM, JOB_STATUS_ERROR, JOB_STATUS_PENDING
from schemas.responses import CompletedResponse, PendingResponse
from services.captions import FastPathOk, is_fast_provider_url
from services.errors import AudioExtractionError, ServiceError, TranscriptionSubmitError, ValidationError
from services.job_store import JobStoreError
from services.webhook_auth import webhook_auth_header
from utils.metrics import incr
from utils.stage_logging import log_stage
from utils.status_machine import transition_set

logger = logging.getLogger("api.orchestrator")

StartJobResult = Union[CompletedResponse, PendingResponse]


def new_job_id() -> str:
    return f"{JOB_ID_PREFIX}{int(time.time() * 1000)}"


def build_webhook_url(base_url: str, job_id: str) -> str:
    return f"{base_url.rstrip('/')}/webhook?{JOB_ID_QUERY_PARAM}={quote(job_id, safe='')}"


class JobOrchestrator:
    def __init__(
        self,
        *,
        store,
        captions,
        extractor,
        transcriber,
        callback_base_url: str,
        webhook_secret: str = "",
        fast_path_enabled: bool = True,
        id_factory: Callable[[], str] = new_job_id,
    ):
        self.store = store
        self.captions = captions
        self.extractor = extractor
        self.transcriber = transcriber
        self.callback_base_url = callback_base_url
        self.webhook_secret = webhook_secret
        self.fast_path_enabled = fast_path_enabled
        self.id_factory = id_factory

    # User value: returns captions immediately when a YouTube video already has them.
    def try_fast_path(self, url: str):
        if not self.fast_path_enabled or not is_fast_provider_url(url):
            return None

        result = self.captions.fetch(url)
        if isinstance(result, FastPathOk):
            incr("transcript_fast_path_total", outcome="ok")
            log_stage(job_id=None, stage="FAST_PATH", event="COMPLETED", url=url, chars=len(result.text))
            return result

        incr("transcript_fast_path_total", outcome="unavailable")
        log_stage(job_id=None, stage="FAST_PATH", event="FALLBACK", url=url, reason=result.reason)
        return result

    # User value: records the failure on the job so pollers stop waiting instead of spinning forever.
    def _fail_job(self, job_id: str, exc: ServiceError) -> None:
        record = {"status": JOB_STATUS_ERROR, "error": exc.details or exc.message}
        try:
            transition_set(self.store, job_id=job_id, record=record, context="start_job")
        except JobStoreError:
            logger.exception("job_failure_write_failed job_id=%s", job_id)

    def start_job(self, url: str | None) -> StartJobResult:
        url = str(url or "").strip()
        if not url:
            raise ValidationError("URL is required", message="URL is required")

        fast = self.try_fast_path(url)
        if isinstance(fast, FastPathOk):
            return CompletedResponse(text=fast.text)

        job_id = self.id_factory()
        # Written before extraction so the webhook and status checks always find a record.
        self.store.set(job_id, {"status": JOB_STATUS_PENDING})
        log_stage(job_id=job_id, stage="JOB_CREATED", event="COMPLETED", url=url)

        try:
            audio = self.extractor.resolve(url)
            log_stage(job_id=job_id, stage="AUDIO_EXTRACTION", event="COMPLETED")

            webhook_url = build_webhook_url(self.callback_base_url, job_id)
            submission = self.transcriber.submit(
                audio.audio_url,
                webhook_url,
                webhook_auth_header=webhook_auth_header(self.webhook_secret, job_id),
            )
        except (AudioExtractionError, TranscriptionSubmitError) as exc:
            stage = "AUDIO_EXTRACTION" if isinstance(exc, AudioExtractionError) else "TRANSCRIPTION_SUBMIT"
            incr("transcript_job_submissions_total", result=exc.error_code.lower())
            log_stage(job_id=job_id, stage=stage, event="FAILED", url=url, error=exc.details or exc.message)
            self._fail_job(job_id, exc)
            raise

        incr("transcript_job_submissions_total", result="accepted")
        log_stage(
            job_id=job_id,
            stage="TRANSCRIPTION_SUBMIT",
            event="COMPLETED",
            transcript_id=submission.transcript_id,
            provider_status=submission.status,
        )
        return PendingResponse(jobId=job_id)
