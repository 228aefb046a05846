# User value: This file gives every failure a stable code so users and clients see consistent error bodies.


class ServiceError(Exception):
    status_code = 500
    error_code = "INTERNAL_SERVER_ERROR"
    message = "Internal Server Error"

    def __init__(self, details: str | None = None, *, message: str | None = None):
        self.details = details
        if message:
            self.message = message
        super().__init__(details or self.message)


class ValidationError(ServiceError):
    status_code = 400
    error_code = "INVALID_REQUEST"
    message = "Invalid request"


class WebhookAuthError(ServiceError):
    status_code = 401
    error_code = "WEBHOOK_UNAUTHORIZED"
    message = "Webhook token rejected"


class NotFoundError(ServiceError):
    status_code = 404
    error_code = "RESOURCE_NOT_FOUND"
    message = "Job not found"


class AudioExtractionError(ServiceError):
    error_code = "AUDIO_EXTRACTION_FAILED"
    message = "Failed to get audio from URL"


class TranscriptionSubmitError(ServiceError):
    error_code = "TRANSCRIPTION_SUBMIT_FAILED"
    message = "Failed to submit transcription job"


class InternalError(ServiceError):
    pass
