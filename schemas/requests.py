# User value: This file describes the inputs users and the provider send so bad input fails early and clearly.
from pydantic import BaseModel, ConfigDict
from typing import Optional


class StartJobRequest(BaseModel):
    # User value: the only thing a user has to give us is the video link.
    url: Optional[str] = None


class WebhookPayload(BaseModel):
    # User value: accepts whatever progress the provider reports so users see the latest label.
    model_config = ConfigDict(extra="allow")

    status: Optional[str] = None
    text: Optional[str] = None
    error: Optional[str] = None
    transcript_id: Optional[str] = None
