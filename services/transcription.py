# User value: This file hands audio to the speech-to-text provider so users get transcripts for videos without captions.
import logging
from dataclasses import dataclass
from typing import Optional

import requests

from services.errors import TranscriptionSubmitError

logger = logging.getLogger("api.transcription")


@dataclass(frozen=True)
class TranscriptSubmission:
    transcript_id: str
    status: str


@dataclass(frozen=True)
class ProviderTranscript:
    transcript_id: str
    status: str
    text: Optional[str] = None
    error: Optional[str] = None


def _response_detail(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return (resp.text or "").strip()[:500] or f"HTTP {resp.status_code}"
    if isinstance(body, dict):
        return str(body.get("error") or body.get("message") or body)
    return str(body)


class AssemblyAIClient:
    """Thin client over the AssemblyAI ``/v2/transcript`` REST resource."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.assemblyai.com",
        timeout_sec: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        if not api_key:
            raise RuntimeError("ASSEMBLYAI_API_KEY not set")
        self.base_url = base_url.rstrip("/")
        self.timeout_sec = timeout_sec
        self._session = session or requests.Session()
        self._session.headers.update({"authorization": api_key})

    def submit(
        self,
        audio_url: str,
        webhook_url: str,
        *,
        webhook_auth_header: Optional[tuple[str, str]] = None,
    ) -> TranscriptSubmission:
        payload = {
            "audio_url": audio_url,
            "webhook_url": webhook_url,
        }
        if webhook_auth_header:
            payload["webhook_auth_header_name"] = webhook_auth_header[0]
            payload["webhook_auth_header_value"] = webhook_auth_header[1]

        try:
            resp = self._session.post(
                f"{self.base_url}/v2/transcript",
                json=payload,
                timeout=self.timeout_sec,
            )
        except requests.RequestException as exc:
            raise TranscriptionSubmitError(f"{exc.__class__.__name__}: {exc}") from exc

        if resp.status_code >= 400:
            raise TranscriptionSubmitError(f"HTTP {resp.status_code}: {_response_detail(resp)}")

        try:
            body = resp.json()
        except ValueError as exc:
            raise TranscriptionSubmitError("Provider returned a non-JSON response") from exc

        transcript_id = str((body or {}).get("id") or "").strip()
        if not transcript_id:
            raise TranscriptionSubmitError("Provider response did not include a transcript id")

        status = str(body.get("status") or "queued")
        logger.info("transcription_submitted transcript_id=%s status=%s", transcript_id, status)
        return TranscriptSubmission(transcript_id=transcript_id, status=status)

    def fetch_transcript(self, transcript_id: str) -> ProviderTranscript:
        resp = self._session.get(
            f"{self.base_url}/v2/transcript/{transcript_id}",
            timeout=self.timeout_sec,
        )
        resp.raise_for_status()
        body = resp.json()
        if not isinstance(body, dict):
            raise ValueError(f"Unexpected transcript response for {transcript_id}: {type(body).__name__}")
        return ProviderTranscript(
            transcript_id=str(body.get("id") or transcript_id),
            status=str(body.get("status") or ""),
            text=body.get("text"),
            error=body.get("error"),
        )
