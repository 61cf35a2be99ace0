"""
Translation provider adapters.

TRANSLATION_CHAIN is the fallback order used by the router: the AI
translator first, then the Dara translator.
"""

from enum import Enum
from typing import Any

from relaybot.config import Settings
from relaybot.gateway import RequestSpec
from relaybot.providers.base import ProviderAdapter
from relaybot.providers.extraction import field, raw_string
from relaybot.registry import ServiceRegistry

TRANSLATION_CACHE_TTL = 3600.0


class TranslationProvider(str, Enum):
    AI_TRANSLATOR = "ai_translator"
    DARA_TRANSLATOR = "dara_translator"


class AITranslatorAdapter(ProviderAdapter):
    provider_id = TranslationProvider.AI_TRANSLATOR.value
    service = "translator"
    endpoint = "translate"
    extractors = (
        field("translated_text"),
        field("translation"),
        field("result"),
        raw_string(),
    )
    cache = True
    cache_ttl = TRANSLATION_CACHE_TTL

    def build_request(
        self,
        registry: ServiceRegistry,
        settings: Settings,
        text: str = "",
        target_language: str = "en",
        source_language: str = "auto",
        **kwargs: Any,
    ) -> RequestSpec:
        return RequestSpec(
            url=self.url(registry),
            service=self.service,
            params={
                "text": text,
                "target_language": target_language,
                "source_language": None if source_language == "auto" else source_language,
            },
            cache=self.cache,
            cache_ttl=self.cache_ttl,
        )


class DaraTranslatorAdapter(ProviderAdapter):
    provider_id = TranslationProvider.DARA_TRANSLATOR.value
    service = "translator_dara"
    endpoint = "translate"
    extractors = (
        field("translatedText"),
        field("translation"),
        field("result"),
        raw_string(),
    )
    cache = True
    cache_ttl = TRANSLATION_CACHE_TTL

    def build_request(
        self,
        registry: ServiceRegistry,
        settings: Settings,
        text: str = "",
        target_language: str = "en",
        **kwargs: Any,
    ) -> RequestSpec:
        return RequestSpec(
            url=self.url(registry),
            service=self.service,
            params={"text": text, "targetLang": target_language},
            cache=self.cache,
            cache_ttl=self.cache_ttl,
        )


TRANSLATION_ADAPTERS: dict[TranslationProvider, ProviderAdapter] = {
    TranslationProvider.AI_TRANSLATOR: AITranslatorAdapter(),
    TranslationProvider.DARA_TRANSLATOR: DaraTranslatorAdapter(),
}

TRANSLATION_CHAIN: tuple[TranslationProvider, ...] = (
    TranslationProvider.AI_TRANSLATOR,
    TranslationProvider.DARA_TRANSLATOR,
)
