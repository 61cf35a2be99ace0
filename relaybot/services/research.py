"""
Research: web search followed by an AI synthesis of the top results.

When the chat provider fails the answer degrades to a plain list of sources
instead of failing the whole request.
"""

import logging
from dataclasses import dataclass, field

from relaybot.gateway import GatewayError
from relaybot.providers import ProviderRouter
from relaybot.services.search import SearchHit, SearchService

logger = logging.getLogger(__name__)

RESEARCH_SOURCES = 5


@dataclass(frozen=True)
class ResearchResult:
    topic: str
    summary: str | None = None
    sources: list[SearchHit] = field(default_factory=list)
    provider: str | None = None
    error: GatewayError | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def synthesized(self) -> bool:
        return self.provider is not None


def build_context(topic: str, hits: list[SearchHit]) -> str:
    lines = [f"Research sources about {topic}:"]
    for hit in hits:
        lines.append(f"{hit.rank}. {hit.title}: {hit.snippet} ({hit.url})")
    return "\n".join(lines)


class ResearchService:
    def __init__(self, search: SearchService, router: ProviderRouter) -> None:
        self._search = search
        self._router = router

    async def research(self, topic: str, provider: str | None = None) -> ResearchResult:
        search = await self._search.search(topic, RESEARCH_SOURCES)
        if not search.success:
            return ResearchResult(topic=search.query, error=search.error)

        hits = search.hits
        if not hits:
            return ResearchResult(topic=search.query)

        chat = await self._router.chat(
            f"Summarize the key findings about: {search.query}",
            provider=provider,
            context=build_context(search.query, hits),
        )
        if not chat.success:
            logger.warning(
                f"Research synthesis failed for '{search.query}', returning sources only"
            )
            return ResearchResult(topic=search.query, sources=hits)

        return ResearchResult(
            topic=search.query, summary=chat.text, sources=hits, provider=chat.provider
        )
