# User value: This file serves the transcript API so users can turn a video link into text.
# app.py
import os
import logging
import time

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from utils.json_logging import configure_json_logging
from utils.metrics import incr, observe_ms

# Load env before importing modules that read os.getenv at import time.
load_dotenv(os.path.join(os.path.dirname(__file__), ".env"))


# User value: prepares readable, structured logs before any request is served.
def configure_logging() -> None:
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    configure_json_logging(service="video-transcript-api", level=level)


configure_logging()
logger = logging.getLogger("api.error")
from startup_env import validate_startup_env
from services.errors import ServiceError
from utils.request_id import REQUEST_ID_HEADER, bind_request_id, current_or_new_request_id, set_request_id

validate_startup_env()

from routes.start_job import router as start_job_router
from routes.status import router as status_router
from routes.webhook import router as webhook_router
from routes.health import router as health_router
from routes.contract import router as contract_router
from routes.metrics import router as metrics_router

app = FastAPI(title="Video Transcript API")


# User value: normalizes data so users see consistent CORS behaviour.
def _parse_csv_env(name: str) -> list[str]:
    raw = os.getenv(name, "")
    values = [x.strip() for x in raw.split(",") if x.strip()]
    seen = set()
    ordered = []
    for item in values:
        if item not in seen:
            seen.add(item)
            ordered.append(item)
    return ordered


@app.middleware("http")
# User value: tags every request with an id so a user's failure can be traced in the logs.
async def request_id_middleware(request: Request, call_next):
    request_id = bind_request_id(request.headers.get(REQUEST_ID_HEADER))
    started = time.perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = int(getattr(response, "status_code", 500))
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
    finally:
        duration_ms = (time.perf_counter() - started) * 1000.0
        method = request.method.upper()
        path = request.url.path
        status_class = f"{status_code // 100}xx"
        incr("api_http_requests_total", method=method, path=path, status_class=status_class, status_code=status_code)
        observe_ms("api_http_request_latency_ms", duration_ms, method=method, path=path, status_class=status_class)
        set_request_id(None)


def _extract_error_message(detail) -> str:
    if isinstance(detail, dict):
        return str(detail.get("error_message") or detail.get("message") or detail.get("detail") or detail)
    if isinstance(detail, list):
        return "; ".join(str(x) for x in detail)
    return str(detail)


def _to_error_code(status_code: int, detail) -> str:
    if isinstance(detail, dict) and detail.get("error_code"):
        return str(detail.get("error_code")).strip().upper()
    if status_code == 401:
        return "UNAUTHORIZED"
    if status_code == 404:
        return "RESOURCE_NOT_FOUND"
    if status_code == 400:
        return "INVALID_REQUEST"
    if status_code == 503:
        return "SERVICE_UNAVAILABLE"
    return f"HTTP_{status_code}"


# User value: keeps every error body the same shape so clients can show a clear message.
def _error_body(*, request: Request, error: str, details=None, error_code: str) -> dict:
    body = {
        "error": error,
        "error_code": error_code,
        "path": request.url.path,
        "request_id": current_or_new_request_id(request.headers.get(REQUEST_ID_HEADER)),
    }
    if details is not None:
        body["details"] = details
    return body


@app.exception_handler(ServiceError)
# User value: turns known failures (bad input, unknown job, provider outage) into clear responses.
async def service_error_handler(request: Request, exc: ServiceError):
    body = _error_body(request=request, error=exc.message, details=exc.details, error_code=exc.error_code)
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "request_failed status=%s path=%s request_id=%s error_code=%s details=%s",
        exc.status_code,
        request.url.path,
        body["request_id"],
        exc.error_code,
        exc.details,
    )
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    body = _error_body(
        request=request,
        error="Request validation failed",
        details=_extract_error_message([e.get("msg") for e in exc.errors()]),
        error_code="VALIDATION_ERROR",
    )
    logger.warning(
        "request_failed_validation status=422 path=%s request_id=%s error_code=%s",
        request.url.path,
        body["request_id"],
        body["error_code"],
    )
    return JSONResponse(status_code=422, content=body)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    body = _error_body(
        request=request,
        error=_extract_error_message(exc.detail),
        error_code=_to_error_code(exc.status_code, exc.detail),
    )
    logger.warning(
        "request_failed status=%s path=%s request_id=%s error_code=%s error=%s",
        exc.status_code,
        request.url.path,
        body["request_id"],
        body["error_code"],
        body["error"],
    )
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(Exception)
# User value: never leaks a stack trace to users; logs it with the request id instead.
async def unhandled_exception_handler(request: Request, exc: Exception):
    body = _error_body(
        request=request,
        error="Internal Server Error",
        details=str(exc),
        error_code="INTERNAL_SERVER_ERROR",
    )
    logger.exception(
        "request_failed_unhandled path=%s request_id=%s error=%s: %s",
        request.url.path,
        body["request_id"],
        exc.__class__.__name__,
        exc,
    )
    return JSONResponse(status_code=500, content=body)


CORS_ALLOW_ORIGINS = _parse_csv_env("CORS_ALLOW_ORIGINS")
CORS_ALLOW_ORIGIN_REGEX = (os.getenv("CORS_ALLOW_ORIGIN_REGEX") or "").strip() or None
logger.info(
    "cors_configured allow_origins=%s allow_origin_regex=%s",
    CORS_ALLOW_ORIGINS,
    CORS_ALLOW_ORIGIN_REGEX or "",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_origin_regex=CORS_ALLOW_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[REQUEST_ID_HEADER],
)

app.include_router(health_router)
app.include_router(contract_router)
app.include_router(metrics_router)
app.include_router(start_job_router)
app.include_router(status_router)
app.include_router(webhook_router)
