# User value: This file wires the real store and providers once so every request uses the same configured collaborators.
"""FastAPI dependency providers.

Each collaborator is built lazily from ``config`` on first use and cached.
Tests replace them through ``app.dependency_overrides``.
"""
from functools import lru_cache

import config
from services.audio_extraction import YtDlpAudioExtractor
from services.captions import CaptionsSource
from services.feature_flags import is_fast_path_enabled, is_webhook_text_fetch_enabled
from services.job_store import InMemoryJobStore, JobStore, RedisJobStore
from services.jobs import WebhookReceiver
from services.orchestrator import JobOrchestrator
from services.redis_client import build_redis_client
from services.transcription import AssemblyAIClient


@lru_cache(maxsize=1)
def get_job_store() -> JobStore:
    if config.JOB_STORE_BACKEND == "memory":
        return InMemoryJobStore()
    return RedisJobStore(build_redis_client(config.REDIS_URL))


@lru_cache(maxsize=1)
def get_transcriber() -> AssemblyAIClient:
    return AssemblyAIClient(
        config.ASSEMBLYAI_API_KEY,
        base_url=config.ASSEMBLYAI_BASE_URL,
        timeout_sec=config.HTTP_TIMEOUT_SEC,
    )


@lru_cache(maxsize=1)
def get_orchestrator() -> JobOrchestrator:
    return JobOrchestrator(
        store=get_job_store(),
        captions=CaptionsSource(languages=config.CAPTION_LANGUAGES),
        extractor=YtDlpAudioExtractor(audio_format=config.YTDLP_AUDIO_FORMAT),
        transcriber=get_transcriber(),
        callback_base_url=config.PUBLIC_BASE_URL,
        webhook_secret=config.WEBHOOK_SECRET,
        fast_path_enabled=is_fast_path_enabled(),
    )


@lru_cache(maxsize=1)
def get_webhook_receiver() -> WebhookReceiver:
    return WebhookReceiver(
        store=get_job_store(),
        webhook_secret=config.WEBHOOK_SECRET,
        transcriber=get_transcriber(),
        fetch_missing_text=is_webhook_text_fetch_enabled(),
    )
