import json
import logging
from datetime import datetime, timezone
from typing import Any

from utils.request_id import get_request_id

logger = logging.getLogger("api.stage")


def _norm(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)


def log_stage(
    *,
    job_id: str | None,
    stage: str,
    event: str,
    url: str | None = None,
    path: str | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    payload = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "job_id": job_id or "-",
        "stage": stage,
        "event": event.upper(),
    }

    request_id = get_request_id()
    if request_id:
        payload["request_id"] = request_id
    if url:
        payload["url"] = url
    if path:
        payload["path"] = path
    if error:
        payload["error"] = error

    for key, value in extra.items():
        norm = _norm(value)
        if norm is not None:
            payload[key] = norm

    msg = json.dumps(payload, ensure_ascii=False)
    if payload["event"] == "FAILED":
        logger.error("stage_event %s", msg)
    elif payload["event"] in {"SKIPPED", "FALLBACK"} or error:
        logger.warning("stage_event %s", msg)
    else:
        logger.info("stage_event %s", msg)
