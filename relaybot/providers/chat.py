"""
AI chat provider adapters.

ChatProvider is the closed set of chat models; CHAT_ADAPTERS maps every
member to the adapter that knows its request shape and response fields.
Adding a model means adding an enum member and an adapter.
"""

from enum import Enum
from typing import Any

from relaybot.config import Settings
from relaybot.gateway import RequestSpec
from relaybot.providers.base import ProviderAdapter
from relaybot.providers.extraction import field, path, raw_string
from relaybot.registry import ServiceRegistry

CHAT_CACHE_TTL = 300.0


class ChatProvider(str, Enum):
    GEMINI = "gemini"
    OPENAI = "openai"
    DEEPSEEK = "deepseek"
    CLAUDE = "claude"
    QWEN = "qwen"
    KIMI = "kimi"
    LLAMA = "llama"


# Names accepted from older command sets
CHAT_ALIASES: dict[str, ChatProvider] = {
    "claudeai": ChatProvider.CLAUDE,
    "laama": ChatProvider.LLAMA,
    "moonshotai": ChatProvider.KIMI,
    "qwen3coder": ChatProvider.QWEN,
}

CHAT_DESCRIPTIONS: dict[ChatProvider, str] = {
    ChatProvider.GEMINI: "Advanced AI model by Google with strong reasoning capabilities",
    ChatProvider.OPENAI: "Fast and efficient AI model by OpenAI",
    ChatProvider.DEEPSEEK: "Specialized AI model for coding and technical tasks",
    ChatProvider.CLAUDE: "AI assistant by Anthropic focused on helpful, harmless, and honest responses",
    ChatProvider.QWEN: "Specialized coding AI model with strong programming capabilities",
    ChatProvider.KIMI: "Advanced AI model with strong multilingual capabilities",
    ChatProvider.LLAMA: "Open-source AI model with strong general capabilities",
}


def parse_chat_provider(name: str | None) -> ChatProvider | None:
    """Enum member for a provider name or alias, None if unknown."""
    if not name:
        return None
    key = name.strip().lower()
    if key in CHAT_ALIASES:
        return CHAT_ALIASES[key]
    try:
        return ChatProvider(key)
    except ValueError:
        return None


def _with_context(prompt: str, context: str | None) -> str:
    if context:
        return f"Context: {context}\n\nUser: {prompt}"
    return prompt


class GeminiAdapter(ProviderAdapter):
    """Gemini generateContent; API key travels as the `key` query parameter."""

    provider_id = ChatProvider.GEMINI.value
    service = "gemini"
    endpoint = "generate_content"
    extractors = (path("candidates", 0, "content", "parts", 0, "text"),)

    def readiness_issue(self, settings: Settings) -> str | None:
        if settings.gemini_api_key is None:
            return "Gemini API key is not configured"
        return None

    def build_request(
        self,
        registry: ServiceRegistry,
        settings: Settings,
        prompt: str = "",
        context: str | None = None,
        **kwargs: Any,
    ) -> RequestSpec:
        return RequestSpec(
            url=self.url(registry),
            service=self.service,
            method="POST",
            params={"key": settings.gemini_api_key.get_secret_value()},
            body={"contents": [{"parts": [{"text": _with_context(prompt, context)}]}]},
        )


class OpenAIAdapter(ProviderAdapter):
    """OpenAI chat completions with bearer authentication."""

    provider_id = ChatProvider.OPENAI.value
    service = "openai"
    endpoint = "chat_completions"
    extractors = (path("choices", 0, "message", "content"),)

    def readiness_issue(self, settings: Settings) -> str | None:
        if settings.openai_api_key is None:
            return "OpenAI API key is not configured"
        return None

    def build_request(
        self,
        registry: ServiceRegistry,
        settings: Settings,
        prompt: str = "",
        context: str | None = None,
        **kwargs: Any,
    ) -> RequestSpec:
        messages = []
        if context:
            messages.append({"role": "system", "content": context})
        messages.append({"role": "user", "content": prompt})

        return RequestSpec(
            url=self.url(registry),
            service=self.service,
            method="POST",
            headers={
                "Authorization": f"Bearer {settings.openai_api_key.get_secret_value()}"
            },
            body={
                "model": settings.openai_chat_model,
                "messages": messages,
                "max_tokens": 1000,
                "temperature": 0.7,
            },
        )


class QueryChatAdapter(ProviderAdapter):
    """Keyless chat proxies answering a GET with the prompt in one query parameter."""

    endpoint = "chat"
    cache = True
    cache_ttl = CHAT_CACHE_TTL

    def __init__(self, provider: ChatProvider, param: str, extractors: tuple) -> None:
        self.provider_id = provider.value
        self.service = provider.value
        self.param = param
        self.extractors = extractors

    def build_request(
        self,
        registry: ServiceRegistry,
        settings: Settings,
        prompt: str = "",
        context: str | None = None,
        **kwargs: Any,
    ) -> RequestSpec:
        return RequestSpec(
            url=self.url(registry),
            service=self.service,
            params={self.param: _with_context(prompt, context)},
            cache=self.cache,
            cache_ttl=self.cache_ttl,
        )


_PROXY_FIELDS = (field("response"), field("text"), raw_string())

CHAT_ADAPTERS: dict[ChatProvider, ProviderAdapter] = {
    ChatProvider.GEMINI: GeminiAdapter(),
    ChatProvider.OPENAI: OpenAIAdapter(),
    ChatProvider.DEEPSEEK: QueryChatAdapter(
        ChatProvider.DEEPSEEK,
        "question",
        (field("result"), field("response"), field("text"), raw_string()),
    ),
    ChatProvider.CLAUDE: QueryChatAdapter(ChatProvider.CLAUDE, "prompt", _PROXY_FIELDS),
    ChatProvider.QWEN: QueryChatAdapter(ChatProvider.QWEN, "prompt", _PROXY_FIELDS),
    ChatProvider.KIMI: QueryChatAdapter(ChatProvider.KIMI, "prompt", _PROXY_FIELDS),
    ChatProvider.LLAMA: QueryChatAdapter(ChatProvider.LLAMA, "prompt", _PROXY_FIELDS),
}
