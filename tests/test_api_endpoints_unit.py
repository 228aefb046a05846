# User value: This test checks the HTTP contract (status codes and bodies) that the browser and CLI depend on.
import os
import unittest

os.environ.setdefault("ASSEMBLYAI_API_KEY", "test-key")
os.environ.setdefault("JOB_STORE_BACKEND", "memory")

from fastapi.testclient import TestClient

from app import app
from services.audio_extraction import AudioSource
from services.captions import FastPathOk, FastPathUnavailable
from services.dependencies import get_job_store, get_orchestrator, get_webhook_receiver
from services.errors import AudioExtractionError
from services.job_store import InMemoryJobStore
from services.jobs import WebhookReceiver
from services.orchestrator import JobOrchestrator
from services.transcription import TranscriptSubmission
from services.webhook_auth import sign_job_id


class StubCaptions:
    def __init__(self, result):
        self.result = result

    def fetch(self, url):
        return self.result


class StubExtractor:
    def __init__(self, error=None):
        self.error = error
        self.calls = 0

    def resolve(self, url):
        self.calls += 1
        if self.error:
            raise self.error
        return AudioSource(audio_url="https://cdn.example.com/a.m4a")


class StubTranscriber:
    def __init__(self):
        self.calls = []

    def submit(self, audio_url, webhook_url, *, webhook_auth_header=None):
        self.calls.append((audio_url, webhook_url, webhook_auth_header))
        return TranscriptSubmission(transcript_id="tr-1", status="queued")


class ApiEndpointsUnitTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryJobStore()
        self.extractor = StubExtractor()
        self.transcriber = StubTranscriber()
        self.captions = StubCaptions(FastPathUnavailable("TranscriptsDisabled"))
        self.secret = ""
        app.dependency_overrides[get_job_store] = lambda: self.store
        app.dependency_overrides[get_orchestrator] = self._orchestrator
        app.dependency_overrides[get_webhook_receiver] = lambda: WebhookReceiver(store=self.store, webhook_secret=self.secret)
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def _orchestrator(self):
        return JobOrchestrator(
            store=self.store,
            captions=self.captions,
            extractor=self.extractor,
            transcriber=self.transcriber,
            callback_base_url="https://transcripts.example.com",
            webhook_secret=self.secret,
            id_factory=lambda: "job42",
        )

    def test_start_job_fast_path_returns_200_completed(self):
        self.captions = StubCaptions(FastPathOk("caption text"))
        resp = self.client.post("/start-job", json={"url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"status": "completed", "text": "caption text"})
        self.assertEqual(self.store.writes, [])

    def test_start_job_slow_path_returns_202_pending(self):
        resp = self.client.post("/start-job", json={"url": "https://www.instagram.com/reel/abc/"})
        self.assertEqual(resp.status_code, 202)
        self.assertEqual(resp.json(), {"status": "pending", "jobId": "job42"})
        self.assertEqual(self.transcriber.calls[0][1], "https://transcripts.example.com/webhook?jobId=job42")

    def test_start_job_missing_url_returns_400(self):
        for body in ({}, {"url": ""}, None):
            resp = self.client.post("/start-job", json=body)
            self.assertEqual(resp.status_code, 400)
            self.assertEqual(resp.json()["error"], "URL is required")
        self.assertEqual(self.store.writes, [])
        self.assertEqual(self.extractor.calls, 0)

    def test_start_job_extraction_failure_returns_500_and_marks_job(self):
        self.extractor = StubExtractor(error=AudioExtractionError("Unsupported URL"))
        resp = self.client.post("/start-job", json={"url": "https://example.com/v"})
        self.assertEqual(resp.status_code, 500)
        body = resp.json()
        self.assertEqual(body["error"], "Failed to get audio from URL")
        self.assertEqual(body["details"], "Unsupported URL")
        self.assertEqual(body["error_code"], "AUDIO_EXTRACTION_FAILED")
        self.assertEqual(self.store.get("job42"), {"status": "error", "error": "Unsupported URL"})

    # User value: the full slow-path round trip ends with the transcript on the status endpoint.
    def test_webhook_then_check_status_round_trip(self):
        self.client.post("/start-job", json={"url": "https://www.instagram.com/reel/abc/"})
        self.assertEqual(self.client.get("/check-status", params={"jobId": "job42"}).json(), {"status": "pending"})

        ack = self.client.post("/webhook", params={"jobId": "job42"}, json={"status": "completed", "text": "hello"})
        self.assertEqual(ack.status_code, 200)
        self.assertEqual(ack.json(), {"received": True})

        resp = self.client.get("/check-status", params={"jobId": "job42"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"status": "completed", "text": "hello"})

    def test_check_status_missing_and_unknown(self):
        self.assertEqual(self.client.get("/check-status").status_code, 400)
        resp = self.client.get("/check-status", params={"jobId": "nope"})
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["error"], "Job not found")

    def test_webhook_missing_job_id_returns_400(self):
        resp = self.client.post("/webhook", json={"status": "completed", "text": "x"})
        self.assertEqual(resp.status_code, 400)

    def test_webhook_unreadable_body_is_acknowledged(self):
        resp = self.client.post("/webhook", params={"jobId": "job42"}, content=b"not json", headers={"Content-Type": "application/json"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"received": True})
        self.assertIsNone(self.store.get("job42"))

    # User value: an empty or status-less callback cannot erase a finished transcript.
    def test_webhook_without_status_keeps_completed_record(self):
        self.store.set("job42", {"status": "completed", "text": "hello"})
        for body in (b"", b"{}", b'{"foo": 1}'):
            resp = self.client.post(
                "/webhook", params={"jobId": "job42"}, content=body, headers={"Content-Type": "application/json"}
            )
            self.assertEqual(resp.status_code, 200)
            self.assertEqual(resp.json(), {"received": True})
        check = self.client.get("/check-status", params={"jobId": "job42"})
        self.assertEqual(check.json(), {"status": "completed", "text": "hello"})

    def test_webhook_token_enforced_when_secret_set(self):
        self.secret = "s3cret"
        bad = self.client.post("/webhook", params={"jobId": "job42"}, json={"status": "completed", "text": "x"})
        self.assertEqual(bad.status_code, 401)
        good = self.client.post(
            "/webhook",
            params={"jobId": "job42"},
            json={"status": "completed", "text": "x"},
            headers={"X-Webhook-Token": sign_job_id("s3cret", "job42")},
        )
        self.assertEqual(good.status_code, 200)

    def test_request_id_echoed(self):
        resp = self.client.get("/check-status", params={"jobId": "nope"}, headers={"X-Request-ID": "req-abcdef12"})
        self.assertEqual(resp.headers["X-Request-ID"], "req-abcdef12")
        self.assertEqual(resp.json()["request_id"], "req-abcdef12")

    def test_health_and_contract(self):
        self.assertEqual(self.client.get("/health").json(), {"status": "OK", "job_store": "connected"})
        contract = self.client.get("/contract/job-status").json()
        self.assertEqual(contract["terminal_statuses"], ["completed", "error"])

    def test_metrics_exposed(self):
        self.client.get("/health")
        resp = self.client.get("/metrics")
        self.assertEqual(resp.status_code, 200)
        self.assertIn("api_http_requests_total", resp.text)


if __name__ == "__main__":
    unittest.main()
