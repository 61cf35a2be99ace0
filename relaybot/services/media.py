"""
YouTube summaries and transcripts.
"""

import logging
import re
from dataclasses import dataclass, field

from relaybot.gateway import ErrorKind, GatewayError, RequestExecutor, RequestSpec
from relaybot.providers import extract_text
from relaybot.providers.extraction import field as field_of
from relaybot.providers.extraction import raw_string

logger = logging.getLogger(__name__)

YOUTUBE_URL_PATTERN = re.compile(
    r"^(https?://)?(www\.)?(youtube\.com/watch\?v=|youtu\.be/)([a-zA-Z0-9_-]{11})"
)

MEDIA_CACHE_TTL = 3600.0
MIN_SUMMARY_WORDS = 15
MAX_SUMMARY_WORDS = 1000

TRANSCRIPT_FIELDS = (
    field_of("transcription"),
    field_of("transcript"),
    field_of("text"),
    raw_string(),
)
SUMMARY_FIELDS = (field_of("summary"), field_of("text"), raw_string())


def extract_video_id(url: str) -> str | None:
    match = YOUTUBE_URL_PATTERN.match((url or "").strip())
    return match.group(4) if match else None


def is_youtube_url(url: str) -> bool:
    return extract_video_id(url) is not None


@dataclass(frozen=True)
class VideoResult:
    video_url: str
    mode: str  # "summarize" | "transcribe"
    video_id: str | None = None
    text: str | None = None
    key_points: list[str] = field(default_factory=list)
    error: GatewayError | None = None

    @property
    def success(self) -> bool:
        return self.error is None


class MediaService:
    def __init__(self, executor: RequestExecutor) -> None:
        self._executor = executor

    def _invalid(self, url: str, mode: str) -> VideoResult:
        return VideoResult(
            video_url=url,
            mode=mode,
            error=GatewayError(ErrorKind.VALIDATION, "Invalid YouTube URL provided"),
        )

    async def transcribe(self, url: str) -> VideoResult:
        url = (url or "").strip()
        video_id = extract_video_id(url)
        if video_id is None:
            return self._invalid(url, "transcribe")

        service = "youtube_transcribe"
        response = await self._executor.execute(
            RequestSpec(
                url=self._executor.registry.endpoint_url(service, "transcribe"),
                service=service,
                params={"url": url},
                cache=True,
                cache_ttl=MEDIA_CACHE_TTL,
            )
        )
        if not response.success:
            return VideoResult(url, "transcribe", video_id, error=response.error)

        text = extract_text(response.data, TRANSCRIPT_FIELDS)
        if text is None:
            return VideoResult(
                url,
                "transcribe",
                video_id,
                error=GatewayError(ErrorKind.DECODE, "No transcript in response"),
            )
        return VideoResult(url, "transcribe", video_id, text=text)

    async def summarize(self, url: str, word_count: int = 200) -> VideoResult:
        url = (url or "").strip()
        video_id = extract_video_id(url)
        if video_id is None:
            return self._invalid(url, "summarize")

        word_count = max(MIN_SUMMARY_WORDS, min(MAX_SUMMARY_WORDS, word_count))
        service = "youtube_summarizer"
        response = await self._executor.execute(
            RequestSpec(
                url=self._executor.registry.endpoint_url(service, "summarize"),
                service=service,
                params={"url": url, "wordCount": word_count},
                cache=True,
                cache_ttl=MEDIA_CACHE_TTL,
            )
        )
        if not response.success:
            return VideoResult(url, "summarize", video_id, error=response.error)

        data = response.data
        text = extract_text(data, SUMMARY_FIELDS)
        if text is None:
            return VideoResult(
                url,
                "summarize",
                video_id,
                error=GatewayError(ErrorKind.DECODE, "No summary in response"),
            )

        key_points: list[str] = []
        if isinstance(data, dict):
            points = data.get("keyPoints") or data.get("key_points")
            if isinstance(points, list):
                key_points = [str(p) for p in points]

        return VideoResult(url, "summarize", video_id, text=text, key_points=key_points)
