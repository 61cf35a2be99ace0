"""
Provider adapter interface and router result types.

An adapter knows how to turn a logical operation (chat prompt, translation)
into a RequestSpec for one upstream service, and how to pull the answer text
back out of that service's response.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from relaybot.config import Settings
from relaybot.gateway import (
    ErrorKind,
    NormalizedResponse,
    RequestExecutor,
    RequestSpec,
)
from relaybot.providers.extraction import Extractor, extract_text
from relaybot.registry import ServiceRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderResult:
    """
    Outcome of a router call.

    Attributes:
        success: Whether usable text was obtained
        text: Extracted answer text (None on failure)
        provider: Provider id that served the result (None on failure)
        response: NormalizedResponse that produced the result, or the
                  aggregate failure
        attempted: Provider ids tried, in order
    """

    success: bool
    text: str | None
    provider: str | None
    response: NormalizedResponse
    attempted: tuple[str, ...] = field(default_factory=tuple)

    @property
    def error_message(self) -> str | None:
        return self.response.error.message if self.response.error else None


class ProviderAdapter(ABC):
    """
    Capability interface for one upstream provider.

    Subclasses set the class attributes and implement build_request().
    """

    provider_id: str
    service: str
    endpoint: str
    extractors: tuple[Extractor, ...] = ()
    cache: bool = False
    cache_ttl: float | None = None

    @abstractmethod
    def build_request(
        self, registry: ServiceRegistry, settings: Settings, **kwargs: Any
    ) -> RequestSpec:
        """Build the RequestSpec for this provider."""

    def readiness_issue(self, settings: Settings) -> str | None:
        """Reason this provider cannot be called (missing credential), if any."""
        return None

    def url(self, registry: ServiceRegistry) -> str:
        return registry.endpoint_url(self.service, self.endpoint)

    async def invoke(self, executor: RequestExecutor, **kwargs: Any) -> NormalizedResponse:
        """Build and execute the request through the gateway."""
        issue = self.readiness_issue(executor.settings)
        if issue is not None:
            return NormalizedResponse.fail(self.service, ErrorKind.VALIDATION, issue)
        spec = self.build_request(executor.registry, executor.settings, **kwargs)
        return await executor.execute(spec)

    def extract(self, response: NormalizedResponse) -> str | None:
        """Answer text from a successful response, or None."""
        if not response.success or response.payload is None:
            return None
        return extract_text(response.payload.value, self.extractors)

    async def run(self, executor: RequestExecutor, **kwargs: Any) -> ProviderResult:
        """
        Invoke and extract in one step.

        A 2xx response without any extractable text counts as a DECODE
        failure for this provider.
        """
        response = await self.invoke(executor, **kwargs)
        if not response.success:
            return ProviderResult(False, None, None, response, (self.provider_id,))

        text = self.extract(response)
        if text is None:
            logger.warning(f"{self.provider_id} returned no usable text")
            failed = NormalizedResponse.fail(
                response.service,
                ErrorKind.DECODE,
                f"No usable text in {self.provider_id} response",
            )
            return ProviderResult(False, None, None, failed, (self.provider_id,))

        return ProviderResult(True, text, self.provider_id, response, (self.provider_id,))
