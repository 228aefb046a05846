# User value: This file fixes the response shapes so the browser and CLI poller can rely on them.
from pydantic import BaseModel, ConfigDict
from typing import Literal, Optional


class CompletedResponse(BaseModel):
    # User value: the transcript is ready right away (captions were available).
    status: Literal["completed"] = "completed"
    text: str


class PendingResponse(BaseModel):
    # User value: gives users a job id to poll while the audio is transcribed.
    status: Literal["pending"] = "pending"
    jobId: str


class JobStatusResponse(BaseModel):
    # User value: shares the stored job as-is so users see exactly what the provider reported.
    model_config = ConfigDict(extra="allow")

    status: str
    text: Optional[str] = None
    error: Optional[str] = None


class WebhookAck(BaseModel):
    received: bool = True


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
    error_code: str
    path: str
    request_id: str
