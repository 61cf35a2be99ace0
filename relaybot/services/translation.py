"""
Translation service: input validation plus the translation fallback chain.
"""

import logging
from dataclasses import dataclass

from relaybot.gateway import ErrorKind, GatewayError
from relaybot.providers import ProviderRouter

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES: dict[str, str] = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ru": "Russian",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese",
    "ar": "Arabic",
    "hi": "Hindi",
    "bn": "Bengali",
    "ur": "Urdu",
    "ne": "Nepali",
    "th": "Thai",
    "vi": "Vietnamese",
    "tr": "Turkish",
    "pl": "Polish",
    "nl": "Dutch",
    "sv": "Swedish",
    "da": "Danish",
    "no": "Norwegian",
    "fi": "Finnish",
}

_NAME_TO_CODE = {name.lower(): code for code, name in SUPPORTED_LANGUAGES.items()}


def resolve_language(value: str | None) -> str | None:
    """Language code for a code or English language name ("es", "Spanish")."""
    if not value:
        return None
    key = value.strip().lower()
    if key in SUPPORTED_LANGUAGES:
        return key
    return _NAME_TO_CODE.get(key)


def language_name(code: str) -> str:
    return SUPPORTED_LANGUAGES.get(code, "Unknown")


@dataclass(frozen=True)
class TranslationResult:
    original_text: str
    target_language: str
    translated_text: str | None = None
    provider: str | None = None
    source_language: str = "auto"
    attempted: tuple[str, ...] = ()
    error: GatewayError | None = None

    @property
    def success(self) -> bool:
        return self.error is None


class TranslationService:
    def __init__(self, router: ProviderRouter) -> None:
        self._router = router

    async def translate(
        self, text: str, target_language: str, source_language: str = "auto"
    ) -> TranslationResult:
        """
        Translate text, trying each translation provider in order.

        Empty text and unsupported target languages fail with VALIDATION
        before any network call.
        """
        text = (text or "").strip()
        if not text:
            return TranslationResult(
                original_text=text,
                target_language=target_language,
                error=GatewayError(ErrorKind.VALIDATION, "Text cannot be empty"),
            )

        target = resolve_language(target_language)
        if target is None:
            return TranslationResult(
                original_text=text,
                target_language=target_language,
                error=GatewayError(
                    ErrorKind.VALIDATION, f"Unsupported language: {target_language}"
                ),
            )

        source = "auto"
        if source_language and source_language != "auto":
            source = resolve_language(source_language) or "auto"

        result = await self._router.translate(text, target, source)
        if not result.success:
            return TranslationResult(
                original_text=text,
                target_language=target,
                source_language=source,
                attempted=result.attempted,
                error=result.response.error,
            )

        return TranslationResult(
            original_text=text,
            target_language=target,
            translated_text=result.text,
            provider=result.provider,
            source_language=source,
            attempted=result.attempted,
        )

    @staticmethod
    def supported_languages() -> dict[str, str]:
        return dict(SUPPORTED_LANGUAGES)
