"""
Service Registry

This module defines the static table of upstream providers the gateway talks
to. Each descriptor carries everything the RequestExecutor needs to call the
service safely:
- Base URL and named endpoint paths
- Per-attempt timeout and retry budget
- Fixed-window rate limit (max requests per window)

Descriptors are loaded once and never mutated; the registry is read-only
after construction and needs no locking.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ServiceCategory(str, Enum):
    """Capability groups used for status reporting."""

    AI = "ai"
    TRANSLATION = "translation"
    SEARCH = "search"
    WEATHER = "weather"
    MEDIA = "media"
    PHONE = "phone"
    AUDIO = "audio"
    IMAGE = "image"


TTS_VOICES: tuple[str, ...] = (
    "Salli", "Matthew", "Joanna", "Ivy", "Justin", "Kendra", "Kimberly",
    "Amy", "Brian", "Emma", "Russell", "Nicole", "Joey", "Conchita",
    "Enrique", "Mia", "Celine", "Mathieu", "Chantal", "Marlene", "Hans",
    "Carla", "Giorgio", "Vitoria", "Ricardo", "Mizuki", "Takumi", "Seoyeon",
    "Zhiyu", "Zeina", "Aditi", "Raveena", "Filiz", "Tatyana", "Maxim",
    "Ewa", "Jacek", "Jan", "Lotte", "Ruben", "Astrid", "Naja", "Mads",
    "Liv", "Suvi",
)


class UnknownServiceError(KeyError):
    """Raised when a service key is not registered."""


class UnknownEndpointError(KeyError):
    """Raised when a service has no endpoint with the requested name."""


class RateLimitConfig(BaseModel):
    """Fixed-window rate limit for one service."""

    model_config = ConfigDict(frozen=True)

    max_requests: int = Field(..., gt=0, description="Requests admitted per window")
    window_seconds: float = Field(..., gt=0, description="Window length in seconds")


class ServiceDescriptor(BaseModel):
    """
    Complete description of one upstream provider.

    This class holds all information needed to:
    1. Build request URLs for the provider's endpoints
    2. Bound each call (timeout, retry budget)
    3. Throttle traffic to the provider
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Registry key used in RequestSpec.service")

    display_name: str = Field(..., description="Human-readable provider name")

    category: ServiceCategory = Field(..., description="Capability group")

    base_url: str = Field(..., description="Scheme and host, no trailing slash")

    endpoints: dict[str, str] = Field(
        ..., min_length=1, description="Endpoint name to path mapping"
    )

    timeout_seconds: float = Field(..., gt=0, description="Per-attempt timeout")

    max_retries: int = Field(..., ge=1, description="Maximum attempts per call")

    rate_limit: RateLimitConfig = Field(..., description="Fixed-window limit")

    requires_api_key: bool = Field(
        default=False, description="Whether calls need a configured credential"
    )

    voices: tuple[str, ...] = Field(
        default=(), description="Voices offered (speech services only)"
    )

    def endpoint_url(self, endpoint: str) -> str:
        """
        Join the base URL with a named endpoint path.

        Raises:
            UnknownEndpointError: If the endpoint is not declared.
        """
        path = self.endpoints.get(endpoint)
        if path is None:
            raise UnknownEndpointError(
                f"Unknown endpoint '{endpoint}' for service '{self.key}'"
            )
        return self.base_url + path

    def worst_case_latency(self, base_delay: float, max_delay: float) -> float:
        """
        Upper bound for one call: every attempt times out and every backoff
        delay is slept in full.
        """
        backoff = sum(
            min(base_delay * 2 ** (attempt - 1), max_delay)
            for attempt in range(1, self.max_retries)
        )
        return self.timeout_seconds * self.max_retries + backoff


def _limit(max_requests: int, window_seconds: float = 60.0) -> RateLimitConfig:
    return RateLimitConfig(max_requests=max_requests, window_seconds=window_seconds)


class ServiceRegistry:
    """
    Central registry of all upstream services.

    Attributes:
        _services: Dictionary mapping service keys to their descriptors
    """

    def __init__(self, descriptors: list[ServiceDescriptor] | None = None) -> None:
        self._services: dict[str, ServiceDescriptor] = {}
        if descriptors is None:
            self._initialize_services()
        else:
            for descriptor in descriptors:
                self._register(descriptor)

    def _initialize_services(self) -> None:
        """Register the default provider table."""

        # AI chat
        self._register(
            ServiceDescriptor(
                key="gemini",
                display_name="Google Gemini",
                category=ServiceCategory.AI,
                base_url="https://generativelanguage.googleapis.com/v1beta",
                endpoints={
                    "generate_content": "/models/gemini-pro:generateContent",
                    "generate_content_vision": "/models/gemini-pro-vision:generateContent",
                },
                timeout_seconds=30.0,
                max_retries=3,
                rate_limit=_limit(60),
                requires_api_key=True,
            )
        )
        self._register(
            ServiceDescriptor(
                key="openai",
                display_name="OpenAI",
                category=ServiceCategory.AI,
                base_url="https://api.openai.com/v1",
                endpoints={"chat_completions": "/chat/completions"},
                timeout_seconds=30.0,
                max_retries=3,
                rate_limit=_limit(50),
                requires_api_key=True,
            )
        )
        self._register(
            ServiceDescriptor(
                key="deepseek",
                display_name="DeepSeek AI",
                category=ServiceCategory.AI,
                base_url="https://deepseek.ytansh038.workers.dev",
                endpoints={"chat": "/"},
                timeout_seconds=15.0,
                max_retries=2,
                rate_limit=_limit(30),
            )
        )
        self._register(
            ServiceDescriptor(
                key="claude",
                display_name="Claude AI",
                category=ServiceCategory.AI,
                base_url="https://claudeai.anshppt19.workers.dev",
                endpoints={"chat": "/api/chat"},
                timeout_seconds=15.0,
                max_retries=2,
                rate_limit=_limit(30),
            )
        )
        self._register(
            ServiceDescriptor(
                key="qwen",
                display_name="Qwen Coder",
                category=ServiceCategory.AI,
                base_url="https://allmodels.revangeapi.workers.dev",
                endpoints={"chat": "/revangeapi/qwen3-coder/chat"},
                timeout_seconds=15.0,
                max_retries=2,
                rate_limit=_limit(30),
            )
        )
        self._register(
            ServiceDescriptor(
                key="kimi",
                display_name="Moonshot Kimi",
                category=ServiceCategory.AI,
                base_url="https://allmodels.revangeapi.workers.dev",
                endpoints={"chat": "/revangeapi/moonshotai-Kimi-K2-Instruct/chat"},
                timeout_seconds=15.0,
                max_retries=2,
                rate_limit=_limit(30),
            )
        )
        self._register(
            ServiceDescriptor(
                key="llama",
                display_name="Llama AI",
                category=ServiceCategory.AI,
                base_url="https://laama.revangeapi.workers.dev",
                endpoints={"chat": "/chat"},
                timeout_seconds=15.0,
                max_retries=2,
                rate_limit=_limit(30),
            )
        )

        # Translation
        self._register(
            ServiceDescriptor(
                key="translator",
                display_name="AI Translator",
                category=ServiceCategory.TRANSLATION,
                base_url="https://sheikhhridoy.nagad.my.id",
                endpoints={"translate": "/api/AI-translator.php"},
                timeout_seconds=10.0,
                max_retries=2,
                rate_limit=_limit(100),
            )
        )
        self._register(
            ServiceDescriptor(
                key="translator_dara",
                display_name="Master Dara Translator",
                category=ServiceCategory.TRANSLATION,
                base_url="https://hs-translate-text.vercel.app",
                endpoints={"translate": "/"},
                timeout_seconds=10.0,
                max_retries=2,
                rate_limit=_limit(100),
            )
        )

        # Search
        self._register(
            ServiceDescriptor(
                key="google_search",
                display_name="Google Search API",
                category=ServiceCategory.SEARCH,
                base_url="https://googlesearchapi.nepcoderapis.workers.dev",
                endpoints={"search": "/"},
                timeout_seconds=15.0,
                max_retries=2,
                rate_limit=_limit(100),
            )
        )

        # Weather
        self._register(
            ServiceDescriptor(
                key="weather",
                display_name="Weather API",
                category=ServiceCategory.WEATHER,
                base_url="https://weather.itz-ashlynn.workers.dev",
                endpoints={
                    "geo_city": "/geo-city",
                    "search_city": "/search-city",
                    "all_weather": "/all-weather",
                },
                timeout_seconds=10.0,
                max_retries=2,
                rate_limit=_limit(200),
            )
        )

        # Media
        self._register(
            ServiceDescriptor(
                key="youtube_transcribe",
                display_name="YouTube Transcribe",
                category=ServiceCategory.MEDIA,
                base_url="https://api.hazex.sbs",
                endpoints={"transcribe": "/yt-transcribe"},
                timeout_seconds=60.0,  # Video processing is slow
                max_retries=2,
                rate_limit=_limit(20),
            )
        )
        self._register(
            ServiceDescriptor(
                key="youtube_summarizer",
                display_name="YouTube Summarizer",
                category=ServiceCategory.MEDIA,
                base_url="https://api.hazex.sbs",
                endpoints={"summarize": "/yt-summarizer"},
                timeout_seconds=60.0,
                max_retries=2,
                rate_limit=_limit(20),
            )
        )

        # Phone
        self._register(
            ServiceDescriptor(
                key="truecaller",
                display_name="Truecaller",
                category=ServiceCategory.PHONE,
                base_url="https://truecaller.privates-bots.workers.dev",
                endpoints={"lookup": "/"},
                timeout_seconds=10.0,
                max_retries=2,
                rate_limit=_limit(50),
            )
        )
        self._register(
            ServiceDescriptor(
                key="phone_info",
                display_name="Phone Info API",
                category=ServiceCategory.PHONE,
                base_url="https://api.yabes-desu.workers.dev",
                endpoints={"info": "/tools/phone-info"},
                timeout_seconds=10.0,
                max_retries=2,
                rate_limit=_limit(100),
            )
        )

        # Audio
        self._register(
            ServiceDescriptor(
                key="tts",
                display_name="Text-to-Speech",
                category=ServiceCategory.AUDIO,
                base_url="https://api.streamelements.com",
                endpoints={"speech": "/kappa/v2/speech"},
                timeout_seconds=15.0,
                max_retries=2,
                rate_limit=_limit(100),
                voices=TTS_VOICES,
            )
        )

        # Image
        self._register(
            ServiceDescriptor(
                key="image_generation",
                display_name="Pollinations Image",
                category=ServiceCategory.IMAGE,
                base_url="https://image.pollinations.ai",
                endpoints={"prompt": "/prompt/"},
                timeout_seconds=60.0,
                max_retries=1,
                rate_limit=_limit(20),
            )
        )

    def _register(self, descriptor: ServiceDescriptor) -> None:
        """Register a service in the registry."""
        self._services[descriptor.key] = descriptor

    def get(self, key: str) -> ServiceDescriptor | None:
        """
        Retrieve a descriptor by key.

        Returns:
            ServiceDescriptor if found, None otherwise
        """
        return self._services.get(key)

    def require(self, key: str) -> ServiceDescriptor:
        """
        Retrieve a descriptor, failing loudly for unknown keys.

        Raises:
            UnknownServiceError: If the key is not registered.
        """
        descriptor = self._services.get(key)
        if descriptor is None:
            raise UnknownServiceError(f"Unknown service: {key}")
        return descriptor

    def endpoint_url(self, key: str, endpoint: str) -> str:
        """Full URL for a service endpoint."""
        return self.require(key).endpoint_url(endpoint)

    def list_services(self) -> list[ServiceDescriptor]:
        """Return all registered descriptors."""
        return list(self._services.values())

    def list_by_category(self, category: ServiceCategory) -> list[ServiceDescriptor]:
        """Return descriptors filtered by category."""
        return [s for s in self._services.values() if s.category == category]

    def get_service_keys(self) -> list[str]:
        """Return all registered service keys."""
        return list(self._services.keys())

    def validate(self, key: str, credentials: dict[str, bool]) -> list[str]:
        """
        Report configuration issues for one service.

        Args:
            key: Service key
            credentials: Mapping of service key to "credential configured"

        Returns:
            List of human-readable issues (empty when healthy)
        """
        descriptor = self.require(key)
        issues = []
        if not descriptor.base_url:
            issues.append("Missing base URL")
        if descriptor.requires_api_key and not credentials.get(key, False):
            issues.append("Missing API key for authenticated service")
        return issues


_registry_instance: ServiceRegistry | None = None


def get_service_registry() -> ServiceRegistry:
    """
    Get the global service registry instance.

    The registry is immutable, so sharing one instance is safe. Mutable
    gateway state (cache, rate windows) lives on the RequestExecutor instead.

    Returns:
        The singleton ServiceRegistry instance
    """
    global _registry_instance
    if _registry_instance is None:
        _registry_instance = ServiceRegistry()
    return _registry_instance
