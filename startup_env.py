import logging
import os
from typing import List

from services.feature_flags import BOOL_FLAG_VALUES, BOOL_FLAGS

logger = logging.getLogger("api.startup")


def _is_blank(value: str | None) -> bool:
    return value is None or not str(value).strip()


def _validate_redis_url(value: str | None, key: str, errors: List[str]) -> None:
    if _is_blank(value):
        errors.append(f"{key} is required")
        return
    if not (value.startswith("redis://") or value.startswith("rediss://")):
        errors.append(f"{key} must start with redis:// or rediss://")


def _validate_http_url(value: str | None, key: str, errors: List[str]) -> None:
    if _is_blank(value):
        return
    if not (value.startswith("http://") or value.startswith("https://")):
        errors.append(f"{key} must start with http:// or https://")


def _validate_bool_flag_env(key: str, errors: List[str]) -> None:
    raw = os.getenv(key)
    if _is_blank(raw):
        return
    if str(raw).strip().lower() not in BOOL_FLAG_VALUES:
        errors.append(f"{key} must be one of {sorted(BOOL_FLAG_VALUES)}")


def _validate_cors_allow_origins(value: str | None, errors: List[str], warnings: List[str]) -> None:
    if _is_blank(value):
        warnings.append("CORS_ALLOW_ORIGINS is not set; browser clients on other origins will be refused")
        return

    origins = [x.strip() for x in str(value).split(",") if x.strip()]
    for origin in origins:
        if origin == "*":
            errors.append("CORS_ALLOW_ORIGINS must not contain '*' in strict allowlist mode")
            continue
        if not (origin.startswith("http://") or origin.startswith("https://")):
            errors.append(f"CORS origin must start with http:// or https://: {origin}")


def validate_startup_env() -> None:
    errors: List[str] = []
    warnings: List[str] = []

    if _is_blank(os.getenv("ASSEMBLYAI_API_KEY")):
        errors.append("ASSEMBLYAI_API_KEY is required")

    backend = str(os.getenv("JOB_STORE_BACKEND", "redis")).strip().lower() or "redis"
    if backend not in {"redis", "memory"}:
        errors.append("JOB_STORE_BACKEND must be one of ['memory', 'redis']")
    elif backend == "redis":
        _validate_redis_url(os.getenv("REDIS_URL", "redis://localhost:6379/0"), "REDIS_URL", errors)
    else:
        warnings.append("JOB_STORE_BACKEND=memory; jobs are lost on restart and not shared between workers")

    _validate_http_url(os.getenv("PUBLIC_BASE_URL"), "PUBLIC_BASE_URL", errors)
    _validate_http_url(os.getenv("ASSEMBLYAI_BASE_URL"), "ASSEMBLYAI_BASE_URL", errors)
    if _is_blank(os.getenv("PUBLIC_BASE_URL")) and _is_blank(os.getenv("VERCEL_URL")):
        warnings.append("PUBLIC_BASE_URL is not set; provider callbacks will target http://localhost:8000")

    _validate_cors_allow_origins(os.getenv("CORS_ALLOW_ORIGINS"), errors, warnings)

    for key in BOOL_FLAGS:
        _validate_bool_flag_env(key, errors)

    if _is_blank(os.getenv("WEBHOOK_SECRET")):
        warnings.append("WEBHOOK_SECRET is not set; /webhook accepts unauthenticated deliveries")

    if errors:
        for err in errors:
            logger.error("startup_env_invalid %s", err)
        raise RuntimeError("Startup env validation failed: " + "; ".join(errors))

    for warning in warnings:
        logger.warning("startup_env_warning %s", warning)

    logger.info(
        "startup_env_validated keys=%s",
        ["ASSEMBLYAI_API_KEY", "JOB_STORE_BACKEND", "REDIS_URL", "PUBLIC_BASE_URL", "WEBHOOK_SECRET"],
    )
