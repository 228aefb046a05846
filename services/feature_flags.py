# User value: This file lets operators switch transcript paths on and off without a redeploy.
import os


BOOL_FLAG_VALUES = {"1", "0", "true", "false", "yes", "no", "on", "off"}


# User value: supports _flag so the transcript journey stays predictable across environments.
def _flag(name: str, default: bool = False) -> bool:
    raw = str(os.getenv(name, "1" if default else "0")).strip().lower()
    return raw in {"1", "true", "yes", "on"}


FEATURE_FAST_PATH = _flag("FEATURE_FAST_PATH", True)
FEATURE_WEBHOOK_TEXT_FETCH = _flag("FEATURE_WEBHOOK_TEXT_FETCH", True)

BOOL_FLAGS = ("FEATURE_FAST_PATH", "FEATURE_WEBHOOK_TEXT_FETCH")


# User value: lets users get free, instant captions before any paid transcription is attempted.
def is_fast_path_enabled() -> bool:
    return FEATURE_FAST_PATH


# User value: fills in transcript text when the provider callback only carries a transcript id.
def is_webhook_text_fetch_enabled() -> bool:
    return FEATURE_WEBHOOK_TEXT_FETCH
