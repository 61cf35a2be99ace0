"""
Providers module: Upstream adapters and the ProviderRouter.

This module contains:
- extraction.py: Ordered field-extraction strategies
- base.py: ProviderAdapter interface and ProviderResult
- chat.py: ChatProvider enum and chat adapters
- translation.py: TranslationProvider enum and translation adapters
- router.py: ProviderRouter (single selection and fallback chains)
"""

from relaybot.providers.base import ProviderAdapter, ProviderResult
from relaybot.providers.chat import (
    CHAT_ADAPTERS,
    CHAT_ALIASES,
    CHAT_DESCRIPTIONS,
    ChatProvider,
    parse_chat_provider,
)
from relaybot.providers.extraction import Extractor, extract_text, field, path, raw_string
from relaybot.providers.router import ProviderChain, ProviderRouter
from relaybot.providers.translation import (
    TRANSLATION_ADAPTERS,
    TRANSLATION_CHAIN,
    TranslationProvider,
)

__all__ = [
    # Interface
    "ProviderAdapter",
    "ProviderResult",
    "ProviderChain",
    "ProviderRouter",
    # Chat
    "ChatProvider",
    "CHAT_ADAPTERS",
    "CHAT_ALIASES",
    "CHAT_DESCRIPTIONS",
    "parse_chat_provider",
    # Translation
    "TranslationProvider",
    "TRANSLATION_ADAPTERS",
    "TRANSLATION_CHAIN",
    # Extraction
    "Extractor",
    "extract_text",
    "field",
    "path",
    "raw_string",
]
