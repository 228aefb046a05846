# User value: This file returns existing YouTube captions instantly so users skip the paid, slow transcription path.
import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Union
from urllib.parse import parse_qs, urlparse

from youtube_transcript_api import CouldNotRetrieveTranscript, NoTranscriptFound, YouTubeTranscriptApi

logger = logging.getLogger("api.captions")

FAST_PROVIDER_HOST_PATTERNS = ("youtube.com", "youtu.be")

_VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")
_PATH_PREFIXES = ("shorts", "embed", "live", "v")


@dataclass(frozen=True)
class FastPathOk:
    text: str


@dataclass(frozen=True)
class FastPathUnavailable:
    reason: str


FastPathResult = Union[FastPathOk, FastPathUnavailable]


# User value: recognizes YouTube links so only they try the free caption lookup.
def is_fast_provider_url(url: str) -> bool:
    value = str(url or "")
    return any(pattern in value for pattern in FAST_PROVIDER_HOST_PATTERNS)


# User value: supports extract_video_id so watch, short, share and embed links all work.
def extract_video_id(url: str) -> Optional[str]:
    parsed = urlparse(str(url or "").strip())
    host = (parsed.hostname or "").lower()
    segments = [s for s in parsed.path.split("/") if s]

    candidate = None
    if host.endswith("youtu.be"):
        candidate = segments[0] if segments else None
    elif host.endswith("youtube.com"):
        query_ids = parse_qs(parsed.query).get("v")
        if query_ids:
            candidate = query_ids[0]
        elif len(segments) >= 2 and segments[0] in _PATH_PREFIXES:
            candidate = segments[1]

    if candidate and _VIDEO_ID_RE.match(candidate):
        return candidate
    return None


def join_snippets(snippets: Iterable) -> str:
    parts = []
    for snippet in snippets:
        text = getattr(snippet, "text", None)
        if text is None and isinstance(snippet, dict):
            text = snippet.get("text")
        text = str(text or "").strip()
        if text:
            parts.append(text)
    return " ".join(parts)


class CaptionsSource:
    """Fetches an existing caption track and joins it into plain text.

    Never raises for caption problems: every failure comes back as
    ``FastPathUnavailable`` with a short machine-readable reason.
    """

    def __init__(self, languages: Iterable[str] = ("en",), api: Optional[YouTubeTranscriptApi] = None):
        self.languages = list(languages) or ["en"]
        self._api = api or YouTubeTranscriptApi()

    def _pick_transcript(self, video_id: str):
        transcript_list = self._api.list(video_id)
        try:
            return transcript_list.find_transcript(self.languages)
        except NoTranscriptFound:
            for transcript in transcript_list:
                return transcript
            raise

    def fetch(self, url: str) -> FastPathResult:
        video_id = extract_video_id(url)
        if not video_id:
            return FastPathUnavailable("video_id_not_found")

        try:
            transcript = self._pick_transcript(video_id)
            text = join_snippets(transcript.fetch())
        except CouldNotRetrieveTranscript as exc:
            return FastPathUnavailable(exc.__class__.__name__)
        except Exception as exc:
            logger.warning("captions_fetch_unexpected_error video_id=%s error=%s: %s", video_id, exc.__class__.__name__, exc)
            return FastPathUnavailable(f"unexpected_error:{exc.__class__.__name__}")

        if not text:
            return FastPathUnavailable("empty_transcript")
        return FastPathOk(text)
