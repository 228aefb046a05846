# User value: This file stops strangers from faking transcript results for a user's job.
import hashlib
import hmac

from schemas.job_contract import WEBHOOK_TOKEN_HEADER
from services.errors import WebhookAuthError


def sign_job_id(secret: str, job_id: str) -> str:
    return hmac.new(secret.encode("utf-8"), job_id.encode("utf-8"), hashlib.sha256).hexdigest()


def webhook_auth_header(secret: str, job_id: str) -> tuple[str, str] | None:
    if not secret:
        return None
    return WEBHOOK_TOKEN_HEADER, sign_job_id(secret, job_id)


def verify_webhook_token(secret: str, job_id: str, token: str | None) -> None:
    """Raise ``WebhookAuthError`` unless ``token`` was issued for ``job_id``.

    With no secret configured every caller is accepted.
    """
    if not secret:
        return
    if not token:
        raise WebhookAuthError("Missing webhook token")
    if not hmac.compare_digest(sign_job_id(secret, job_id), token.strip()):
        raise WebhookAuthError("Webhook token does not match job")
