# User value: This file pins the job status vocabulary shared by the API, the webhook and the poller.
CONTRACT_VERSION = "2026-10-19-transcript-v1"

JOB_STATUS_PENDING = "pending"
JOB_STATUS_COMPLETED = "completed"
JOB_STATUS_ERROR = "error"

JOB_STATUSES = (
    JOB_STATUS_PENDING,
    JOB_STATUS_COMPLETED,
    JOB_STATUS_ERROR,
)

TERMINAL_STATUSES = (
    JOB_STATUS_COMPLETED,
    JOB_STATUS_ERROR,
)

# Provider-side progress labels seen on webhooks; stored verbatim, never required.
PROVIDER_PROGRESS_STATUSES = (
    "queued",
    "processing",
)

JOB_ID_PREFIX = "job"
JOB_ID_QUERY_PARAM = "jobId"
WEBHOOK_TOKEN_HEADER = "X-Webhook-Token"

CANONICAL_FIELDS = (
    "status",
    "text",
    "error",
)
