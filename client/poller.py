# User value: This file submits a video link and waits for the transcript, so users don't poll by hand.
"""Client-side submit-and-poll state machine.

States move ``idle -> loading -> (completed | error | pending)`` and, while
pending, poll ``/check-status`` until a terminal status arrives. Unlike the
server-side ``error`` status, ``timeout`` means the client gave up waiting
after ``max_attempts`` polls or ``max_wait_sec`` seconds.
"""
import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import requests

from schemas.job_contract import JOB_ID_QUERY_PARAM, JOB_STATUS_COMPLETED, JOB_STATUS_ERROR, JOB_STATUS_PENDING

logger = logging.getLogger("client.poller")


class PollState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    PENDING = "pending"
    COMPLETED = "completed"
    ERROR = "error"
    TIMEOUT = "timeout"


TERMINAL_POLL_STATES = (PollState.COMPLETED, PollState.ERROR, PollState.TIMEOUT)


@dataclass
class PollOutcome:
    state: PollState
    job_id: Optional[str] = None
    text: Optional[str] = None
    error: Optional[str] = None
    attempts: int = 0
    cancelled: bool = False


def _json_or_none(resp: requests.Response):
    try:
        return resp.json()
    except ValueError:
        return None


def _error_message(body, fallback: str) -> str:
    if isinstance(body, dict) and body.get("error"):
        details = body.get("details")
        return f"{body['error']}: {details}" if details else str(body["error"])
    return fallback


class TranscriptPoller:
    def __init__(
        self,
        base_url: str,
        *,
        interval_sec: float = 3.0,
        backoff: float = 1.0,
        max_interval_sec: float = 30.0,
        max_attempts: int = 200,
        max_wait_sec: Optional[float] = None,
        request_timeout_sec: float = 30.0,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.monotonic,
        on_transition: Optional[Callable[[PollState, PollState], None]] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if backoff < 1.0:
            raise ValueError("backoff must be >= 1.0")
        self.base_url = base_url.rstrip("/")
        self.interval_sec = max(0.0, interval_sec)
        self.backoff = backoff
        self.max_interval_sec = max_interval_sec
        self.max_attempts = max_attempts
        self.max_wait_sec = max_wait_sec
        self.request_timeout_sec = request_timeout_sec
        self._session = session or requests.Session()
        self._clock = clock
        self._on_transition = on_transition
        self._cancelled = threading.Event()
        self.state = PollState.IDLE

    def cancel(self) -> None:
        """Stop polling at the next wait; safe to call from another thread."""
        self._cancelled.set()

    def _move(self, target: PollState) -> None:
        previous, self.state = self.state, target
        logger.debug("poll_state_transition from=%s to=%s", previous.value, target.value)
        if self._on_transition:
            self._on_transition(previous, target)

    def _finish(self, state: PollState, outcome: PollOutcome) -> PollOutcome:
        self._move(state)
        outcome.state = state
        return outcome

    def delay_for(self, attempt: int) -> float:
        delay = self.interval_sec * (self.backoff ** max(0, attempt - 1))
        return min(delay, self.max_interval_sec)

    def submit(self, url: str) -> PollOutcome:
        self._move(PollState.LOADING)
        outcome = PollOutcome(state=PollState.LOADING)
        try:
            resp = self._session.post(
                f"{self.base_url}/start-job",
                json={"url": url},
                timeout=self.request_timeout_sec,
            )
        except requests.RequestException as exc:
            outcome.error = f"{exc.__class__.__name__}: {exc}"
            return self._finish(PollState.ERROR, outcome)

        body = _json_or_none(resp)
        status = body.get("status") if isinstance(body, dict) else None

        if resp.ok and status == JOB_STATUS_COMPLETED:
            outcome.text = body.get("text") or ""
            return self._finish(PollState.COMPLETED, outcome)
        if resp.ok and status == JOB_STATUS_PENDING and body.get("jobId"):
            outcome.job_id = str(body["jobId"])
            return self._finish(PollState.PENDING, outcome)

        outcome.error = _error_message(body, f"Unexpected start-job response (HTTP {resp.status_code})")
        return self._finish(PollState.ERROR, outcome)

    def check_once(self, job_id: str) -> dict:
        resp = self._session.get(
            f"{self.base_url}/check-status",
            params={JOB_ID_QUERY_PARAM: job_id},
            timeout=self.request_timeout_sec,
        )
        body = _json_or_none(resp)
        if not isinstance(body, dict) or not isinstance(body.get("status"), str):
            return {"status": None, "error": _error_message(body, f"Unexpected check-status response (HTTP {resp.status_code})")}
        return body

    def poll(self, outcome: PollOutcome) -> PollOutcome:
        started = self._clock()
        while outcome.attempts < self.max_attempts:
            delay = self.delay_for(outcome.attempts + 1)
            if self.max_wait_sec is not None:
                remaining = self.max_wait_sec - (self._clock() - started)
                if remaining <= 0:
                    break
                delay = min(delay, remaining)
            if self._cancelled.wait(delay):
                outcome.cancelled = True
                return outcome

            outcome.attempts += 1
            try:
                body = self.check_once(outcome.job_id)
            except requests.RequestException as exc:
                outcome.error = f"Error checking status: {exc.__class__.__name__}: {exc}"
                return self._finish(PollState.ERROR, outcome)

            status = body.get("status")
            if status == JOB_STATUS_COMPLETED:
                outcome.text = body.get("text") or ""
                return self._finish(PollState.COMPLETED, outcome)
            if status == JOB_STATUS_ERROR or status is None:
                outcome.error = str(body.get("error") or "Transcription failed")
                return self._finish(PollState.ERROR, outcome)
            logger.info("poll_pending job_id=%s attempt=%s status=%s", outcome.job_id, outcome.attempts, status)

        outcome.error = f"Gave up after {outcome.attempts} status checks"
        return self._finish(PollState.TIMEOUT, outcome)

    def run(self, url: str) -> PollOutcome:
        outcome = self.submit(url)
        if self.state is not PollState.PENDING:
            return outcome
        return self.poll(outcome)
