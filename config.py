import os
from dotenv import load_dotenv

load_dotenv()


def _csv(name: str, default: str = "") -> list[str]:
    raw = os.getenv(name, default)
    return [x.strip() for x in raw.split(",") if x.strip()]


def resolve_public_base_url() -> str:
    explicit = (os.getenv("PUBLIC_BASE_URL") or "").strip().rstrip("/")
    if explicit:
        return explicit
    vercel_host = (os.getenv("VERCEL_URL") or "").strip().rstrip("/")
    if vercel_host:
        return f"https://{vercel_host}"
    return "http://localhost:8000"


REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
JOB_STORE_BACKEND = os.environ.get("JOB_STORE_BACKEND", "redis").strip().lower() or "redis"

ASSEMBLYAI_API_KEY = os.environ.get("ASSEMBLYAI_API_KEY", "")
ASSEMBLYAI_BASE_URL = os.environ.get("ASSEMBLYAI_BASE_URL", "https://api.assemblyai.com").rstrip("/")
HTTP_TIMEOUT_SEC = float(os.environ.get("HTTP_TIMEOUT_SEC", "30"))

PUBLIC_BASE_URL = resolve_public_base_url()
WEBHOOK_SECRET = os.environ.get("WEBHOOK_SECRET", "")

YTDLP_AUDIO_FORMAT = os.environ.get("YTDLP_AUDIO_FORMAT", "ba/bestaudio")
CAPTION_LANGUAGES = _csv("CAPTION_LANGUAGES", "en")
