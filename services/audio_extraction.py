# User value: This file turns any supported video link (Instagram, YouTube, ...) into a direct audio URL for transcription.
import logging
from dataclasses import dataclass
from typing import Any, Optional

import yt_dlp
from yt_dlp.utils import DownloadError

from services.errors import AudioExtractionError

logger = logging.getLogger("api.audio_extraction")


@dataclass(frozen=True)
class AudioSource:
    audio_url: str


def _is_http_url(value: Any) -> bool:
    return isinstance(value, str) and value.strip().startswith("http")


def _audio_only(fmt: dict) -> bool:
    return fmt.get("vcodec") in (None, "none") and fmt.get("acodec") not in (None, "none")


# User value: reads whichever shape yt-dlp hands back so callers always get one audio URL.
def pick_audio_url(info: Optional[dict]) -> Optional[str]:
    if not isinstance(info, dict):
        return None

    # Playlists and carousels: first entry with audio wins.
    entries = info.get("entries")
    if entries:
        for entry in entries:
            found = pick_audio_url(entry)
            if found:
                return found
        return None

    if _is_http_url(info.get("url")):
        return info["url"].strip()

    requested = info.get("requested_formats") or []
    for fmt in requested:
        if _audio_only(fmt) and _is_http_url(fmt.get("url")):
            return fmt["url"].strip()
    for fmt in requested:
        if _is_http_url(fmt.get("url")):
            return fmt["url"].strip()

    formats = [f for f in (info.get("formats") or []) if _is_http_url(f.get("url"))]
    audio_formats = [f for f in formats if _audio_only(f)]
    if audio_formats:
        best = max(audio_formats, key=lambda f: float(f.get("abr") or f.get("tbr") or 0))
        return best["url"].strip()
    if formats:
        return formats[-1]["url"].strip()
    return None


class YtDlpAudioExtractor:
    def __init__(self, audio_format: str = "ba/bestaudio", extra_opts: Optional[dict] = None):
        self.audio_format = audio_format
        self._opts = {
            "format": audio_format,
            "quiet": True,
            "no_warnings": True,
            "noplaylist": True,
            "skip_download": True,
        }
        self._opts.update(extra_opts or {})

    def resolve(self, url: str) -> AudioSource:
        try:
            with yt_dlp.YoutubeDL(dict(self._opts)) as ydl:
                info = ydl.extract_info(url, download=False)
        except DownloadError as exc:
            raise AudioExtractionError(str(exc)) from exc
        except Exception as exc:
            logger.exception("audio_extraction_unexpected_error url=%s", url)
            raise AudioExtractionError(f"{exc.__class__.__name__}: {exc}") from exc

        audio_url = pick_audio_url(info)
        if not audio_url:
            raise AudioExtractionError("Could not get a valid audio URL from yt-dlp.")
        return AudioSource(audio_url=audio_url)
