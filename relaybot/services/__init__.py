"""
Services module: Domain operations built on the gateway.

Each service validates its input (VALIDATION failures never reach the
network), calls the RequestExecutor or ProviderRouter, and returns a frozen
result dataclass with an `error` field instead of raising.

Key exports:
- ServiceBundle: Every service wired to one executor
- build_services(): Factory used by the app lifespan, tests and demo
"""

from dataclasses import dataclass

from relaybot.gateway import RequestExecutor
from relaybot.providers import ProviderRouter
from relaybot.services.images import ImageResult, ImageService
from relaybot.services.media import MediaService, VideoResult, extract_video_id, is_youtube_url
from relaybot.services.phone import (
    PhoneLookup,
    PhoneService,
    PhoneSpecs,
    is_phone_number,
    normalize_phone_number,
)
from relaybot.services.research import ResearchResult, ResearchService
from relaybot.services.search import SearchHit, SearchResult, SearchService
from relaybot.services.translation import (
    SUPPORTED_LANGUAGES,
    TranslationResult,
    TranslationService,
    language_name,
    resolve_language,
)
from relaybot.services.tts import SpeechResult, TTSService
from relaybot.services.weather import City, WeatherReport, WeatherService


@dataclass(frozen=True)
class ServiceBundle:
    """All domain services sharing one executor and router."""

    executor: RequestExecutor
    router: ProviderRouter
    translation: TranslationService
    search: SearchService
    weather: WeatherService
    media: MediaService
    phone: PhoneService
    tts: TTSService
    images: ImageService
    research: ResearchService


def build_services(executor: RequestExecutor) -> ServiceBundle:
    """Wire every domain service to the given executor."""
    router = ProviderRouter(executor)
    search = SearchService(executor)
    return ServiceBundle(
        executor=executor,
        router=router,
        translation=TranslationService(router),
        search=search,
        weather=WeatherService(executor, locale=executor.settings.default_language),
        media=MediaService(executor),
        phone=PhoneService(executor),
        tts=TTSService(executor),
        images=ImageService(executor),
        research=ResearchService(search, router),
    )


__all__ = [
    "ServiceBundle",
    "build_services",
    # Translation
    "TranslationService",
    "TranslationResult",
    "SUPPORTED_LANGUAGES",
    "resolve_language",
    "language_name",
    # Search
    "SearchService",
    "SearchResult",
    "SearchHit",
    # Weather
    "WeatherService",
    "WeatherReport",
    "City",
    # Media
    "MediaService",
    "VideoResult",
    "extract_video_id",
    "is_youtube_url",
    # Phone
    "PhoneService",
    "PhoneLookup",
    "PhoneSpecs",
    "normalize_phone_number",
    "is_phone_number",
    # Audio / image
    "TTSService",
    "SpeechResult",
    "ImageService",
    "ImageResult",
    # Research
    "ResearchService",
    "ResearchResult",
]
