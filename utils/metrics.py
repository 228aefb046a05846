import logging

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

logger = logging.getLogger("api.metrics")

HTTP_REQUESTS = Counter(
    "api_http_requests_total",
    "HTTP requests",
    ["method", "path", "status_class", "status_code"],
)

HTTP_LATENCY = Histogram(
    "api_http_request_latency_ms",
    "HTTP request latency in milliseconds",
    ["method", "path", "status_class"],
    buckets=(5, 10, 25, 50, 100, 250, 500, 1000, 2500, 5000, 10000, 30000),
)

FAST_PATH_RESULTS = Counter(
    "transcript_fast_path_total",
    "Caption fast-path outcomes",
    ["outcome"],
)

JOB_SUBMISSIONS = Counter(
    "transcript_job_submissions_total",
    "Slow-path job submissions",
    ["result"],
)

WEBHOOK_EVENTS = Counter(
    "transcript_webhook_events_total",
    "Provider webhook deliveries",
    ["status"],
)

TERMINAL_OVERWRITES = Counter(
    "transcript_terminal_overwrites_total",
    "Webhook writes that replaced an already terminal job",
)

_COUNTERS = {
    "api_http_requests_total": HTTP_REQUESTS,
    "transcript_fast_path_total": FAST_PATH_RESULTS,
    "transcript_job_submissions_total": JOB_SUBMISSIONS,
    "transcript_webhook_events_total": WEBHOOK_EVENTS,
    "transcript_terminal_overwrites_total": TERMINAL_OVERWRITES,
}

_HISTOGRAMS = {
    "api_http_request_latency_ms": HTTP_LATENCY,
}


def incr(name: str, amount: float = 1, **labels) -> None:
    counter = _COUNTERS.get(name)
    if counter is None:
        logger.warning("metrics_unknown_counter name=%s", name)
        return
    if labels:
        counter.labels(**{k: str(v) for k, v in labels.items()}).inc(amount)
    else:
        counter.inc(amount)


def observe_ms(name: str, value_ms: float, **labels) -> None:
    histogram = _HISTOGRAMS.get(name)
    if histogram is None:
        logger.warning("metrics_unknown_histogram name=%s", name)
        return
    if labels:
        histogram.labels(**{k: str(v) for k, v in labels.items()}).observe(value_ms)
    else:
        histogram.observe(value_ms)


def render_latest() -> tuple[bytes, str]:
    return generate_latest(), CONTENT_TYPE_LATEST
