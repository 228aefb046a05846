# User value: This file keeps job progress between the submit call, the provider callback and user polling.
"""Key-value persistence for transcript jobs.

Every store maps a job id to a JSON-compatible record ``{status, text?, error?}``.
Writes are last-writer-wins; nothing here expires, indexes or deletes jobs.
"""
import json
import logging
import threading
from typing import Dict, Optional

import redis

from services.errors import InternalError

logger = logging.getLogger("api.job_store")


class JobStoreError(InternalError):
    error_code = "INFRA_JOB_STORE"


class JobStore:
    def set(self, job_id: str, record: dict) -> None:
        raise NotImplementedError

    def get(self, job_id: str) -> Optional[dict]:
        raise NotImplementedError

    def ping(self) -> bool:
        return True


class RedisJobStore(JobStore):
    def __init__(self, client: redis.Redis, key_prefix: str = ""):
        self._r = client
        self._prefix = key_prefix

    def _key(self, job_id: str) -> str:
        return f"{self._prefix}{job_id}"

    def set(self, job_id: str, record: dict) -> None:
        try:
            self._r.set(self._key(job_id), json.dumps(record, ensure_ascii=False))
        except redis.RedisError as exc:
            raise JobStoreError(f"job store write failed: {exc}") from exc

    def get(self, job_id: str) -> Optional[dict]:
        try:
            raw = self._r.get(self._key(job_id))
        except redis.RedisError as exc:
            raise JobStoreError(f"job store read failed: {exc}") from exc
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("job_store_corrupt_record job_id=%s", job_id)
            raise JobStoreError(f"job store record for {job_id} is not valid JSON")
        return data if isinstance(data, dict) else None

    def ping(self) -> bool:
        try:
            return bool(self._r.ping())
        except redis.RedisError:
            return False


class InMemoryJobStore(JobStore):
    """Process-local store for tests and single-process local runs."""

    def __init__(self):
        self._jobs: Dict[str, dict] = {}
        self._lock = threading.Lock()
        self.writes: list[tuple[str, dict]] = []

    def set(self, job_id: str, record: dict) -> None:
        with self._lock:
            self._jobs[job_id] = dict(record)
            self.writes.append((job_id, dict(record)))

    def get(self, job_id: str) -> Optional[dict]:
        with self._lock:
            record = self._jobs.get(job_id)
            return dict(record) if record is not None else None
