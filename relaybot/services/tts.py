"""
Text-to-speech through the StreamElements speech endpoint.

The reply is a media instruction pointing at the resolved audio URL; the
gateway call validates (and caches) the audio before that URL is handed out.
"""

import logging
from dataclasses import dataclass

from relaybot.gateway import (
    ErrorKind,
    GatewayError,
    PayloadKind,
    RequestExecutor,
    RequestSpec,
    resolve_url,
)

logger = logging.getLogger(__name__)

TTS_CACHE_TTL = 3600.0

VOICES_BY_LANGUAGE: dict[str, tuple[str, ...]] = {
    "en-US": ("Salli", "Matthew", "Joanna", "Ivy", "Justin", "Kendra", "Kimberly",
              "Amy", "Brian", "Emma", "Russell", "Nicole", "Joey"),
    "en-GB": ("Amy", "Brian", "Emma", "Russell"),
    "en-AU": ("Nicole", "Russell"),
    "es-ES": ("Conchita", "Enrique"),
    "es-MX": ("Mia",),
    "fr-FR": ("Celine", "Mathieu"),
    "fr-CA": ("Chantal",),
    "de-DE": ("Marlene", "Hans"),
    "it-IT": ("Carla", "Giorgio"),
    "pt-BR": ("Vitoria", "Ricardo"),
    "ja-JP": ("Mizuki", "Takumi"),
    "ko-KR": ("Seoyeon",),
    "zh-CN": ("Zhiyu",),
    "ar-XA": ("Zeina",),
    "hi-IN": ("Aditi", "Raveena"),
    "tr-TR": ("Filiz",),
    "ru-RU": ("Tatyana", "Maxim"),
    "pl-PL": ("Ewa", "Jacek", "Jan"),
    "nl-NL": ("Lotte", "Ruben"),
    "sv-SE": ("Astrid",),
    "da-DK": ("Naja", "Mads"),
    "no-NO": ("Liv",),
    "fi-FI": ("Suvi",),
}


@dataclass(frozen=True)
class SpeechResult:
    text: str
    voice: str
    audio_url: str | None = None
    content_type: str | None = None
    error: GatewayError | None = None

    @property
    def success(self) -> bool:
        return self.error is None


class TTSService:
    service = "tts"

    def __init__(self, executor: RequestExecutor) -> None:
        self._executor = executor
        self._settings = executor.settings

    @property
    def voices(self) -> tuple[str, ...]:
        return self._executor.registry.require(self.service).voices

    def match_voice(self, name: str | None) -> str | None:
        """Canonical voice name for a case-insensitive match, or None."""
        if not name:
            return None
        wanted = name.strip().lower()
        return next((v for v in self.voices if v.lower() == wanted), None)

    def voices_by_language(self) -> dict[str, tuple[str, ...]]:
        available = set(self.voices)
        return {
            lang: tuple(v for v in names if v in available)
            for lang, names in VOICES_BY_LANGUAGE.items()
        }

    async def synthesize(self, text: str, voice: str | None = None) -> SpeechResult:
        text = (text or "").strip()
        selected = self.match_voice(voice) or self._settings.default_tts_voice

        if not text:
            return SpeechResult(
                text=text,
                voice=selected,
                error=GatewayError(ErrorKind.VALIDATION, "Text cannot be empty"),
            )
        if len(text) > self._settings.max_tts_chars:
            return SpeechResult(
                text=text,
                voice=selected,
                error=GatewayError(
                    ErrorKind.VALIDATION,
                    f"Text too long (max {self._settings.max_tts_chars} characters)",
                ),
            )

        spec = RequestSpec(
            url=self._executor.registry.endpoint_url(self.service, "speech"),
            service=self.service,
            params={"voice": selected, "text": text},
            cache=True,
            cache_ttl=TTS_CACHE_TTL,
        )
        response = await self._executor.execute(spec)
        if not response.success:
            return SpeechResult(text=text, voice=selected, error=response.error)

        content_type = (
            response.payload.content_type
            if response.payload.kind == PayloadKind.BINARY
            else "audio/mpeg"
        )
        return SpeechResult(
            text=text,
            voice=selected,
            audio_url=resolve_url(spec.url, spec.params),
            content_type=content_type,
        )
