"""
Provider Router - maps logical operations onto upstream providers.

Two dispatch modes:
1. Single selection (chat): the caller names a model; unknown names are
   replaced by the configured default before any network call, and exactly
   one provider runs.
2. Ordered fallback (translation): providers run strictly in order until one
   succeeds. A provider that already failed within its own retry budget is
   not retried here. When every provider fails the router returns one
   CHAIN_EXHAUSTED failure naming each of them.
"""

import logging
from dataclasses import dataclass
from typing import Any

from relaybot.config import Settings
from relaybot.gateway import (
    ErrorKind,
    NormalizedResponse,
    ProviderFailure,
    RequestExecutor,
)
from relaybot.providers.base import ProviderAdapter, ProviderResult
from relaybot.providers.chat import CHAT_ADAPTERS, ChatProvider, parse_chat_provider
from relaybot.providers.translation import (
    TRANSLATION_ADAPTERS,
    TRANSLATION_CHAIN,
    TranslationProvider,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderChain:
    """Named, ordered list of adapters tried until one succeeds."""

    name: str
    adapters: tuple[ProviderAdapter, ...]

    @property
    def provider_ids(self) -> tuple[str, ...]:
        return tuple(a.provider_id for a in self.adapters)


class ProviderRouter:
    """
    Router over the chat and translation adapters.

    Usage:
        router = ProviderRouter(executor)
        result = await router.chat("Hello", provider="claude")
        result = await router.translate("Hello", "es")
    """

    def __init__(
        self,
        executor: RequestExecutor,
        settings: Settings | None = None,
        chat_adapters: dict[ChatProvider, ProviderAdapter] | None = None,
        translation_adapters: dict[TranslationProvider, ProviderAdapter] | None = None,
    ) -> None:
        self._executor = executor
        self._settings = settings or executor.settings
        self._chat_adapters = chat_adapters or CHAT_ADAPTERS
        self._translation_adapters = translation_adapters or TRANSLATION_ADAPTERS

    @property
    def default_chat_provider(self) -> ChatProvider:
        return ChatProvider(self._settings.default_ai_provider)

    def resolve_chat_provider(self, name: str | None) -> ChatProvider:
        """Enum member for `name`, or the default when missing or unknown."""
        provider = parse_chat_provider(name)
        if provider is None:
            if name:
                logger.info(
                    f"Unknown chat provider '{name}', using {self.default_chat_provider.value}"
                )
            return self.default_chat_provider
        return provider

    async def chat(
        self,
        prompt: str,
        provider: str | ChatProvider | None = None,
        context: str | None = None,
    ) -> ProviderResult:
        """
        Single-selection chat.

        Args:
            prompt: User message
            provider: Provider name, alias or enum member (None = default)
            context: Optional system/context text

        Returns:
            ProviderResult from exactly one provider.
        """
        selected = (
            provider
            if isinstance(provider, ChatProvider)
            else self.resolve_chat_provider(provider)
        )
        adapter = self._chat_adapters[selected]

        if not prompt or not prompt.strip():
            failed = NormalizedResponse.fail(
                adapter.service, ErrorKind.VALIDATION, "Message cannot be empty"
            )
            return ProviderResult(False, None, None, failed, ())

        logger.info(f"Chat via {selected.value}")
        result = await adapter.run(self._executor, prompt=prompt.strip(), context=context)
        if not result.success:
            logger.error(f"Chat via {selected.value} failed: {result.error_message}")
        return result

    def translation_chain(self) -> ProviderChain:
        return ProviderChain(
            name="translation",
            adapters=tuple(self._translation_adapters[p] for p in TRANSLATION_CHAIN),
        )

    async def run_chain(self, chain: ProviderChain, **kwargs: Any) -> ProviderResult:
        """
        Try each adapter in order; stop at the first success.

        Returns:
            The serving provider's result, or one CHAIN_EXHAUSTED failure
            listing every attempted provider.
        """
        attempted: list[str] = []
        failures: list[ProviderFailure] = []

        for adapter in chain.adapters:
            attempted.append(adapter.provider_id)
            result = await adapter.run(self._executor, **kwargs)

            if result.success:
                if failures:
                    logger.info(
                        f"{chain.name} served by fallback {adapter.provider_id} "
                        f"after {len(failures)} failure(s)"
                    )
                return ProviderResult(
                    True, result.text, adapter.provider_id, result.response, tuple(attempted)
                )

            error = result.response.error
            failures.append(ProviderFailure(adapter.provider_id, error.kind, error.message))
            logger.warning(f"{chain.name} provider {adapter.provider_id} failed: {error.message}")

        summary = "; ".join(f"{f.provider}: {f.message}" for f in failures)
        logger.error(f"All {chain.name} providers failed: {summary}")
        exhausted = NormalizedResponse.fail(
            chain.name,
            ErrorKind.CHAIN_EXHAUSTED,
            f"All {chain.name} providers failed: {summary}",
            failures=tuple(failures),
        )
        return ProviderResult(False, None, None, exhausted, tuple(attempted))

    async def translate(
        self, text: str, target_language: str, source_language: str = "auto"
    ) -> ProviderResult:
        """Translate through the fallback chain."""
        return await self.run_chain(
            self.translation_chain(),
            text=text,
            target_language=target_language,
            source_language=source_language,
        )
