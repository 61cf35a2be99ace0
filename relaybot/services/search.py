"""
Web and news search over the Google search proxy.

Result shapes vary by upstream: a bare list, or a list under `results`,
`items` or `organic`. Each hit is normalized to a SearchHit.
"""

import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlparse

from relaybot.gateway import ErrorKind, GatewayError, RequestExecutor, RequestSpec

logger = logging.getLogger(__name__)

DEFAULT_RESULT_COUNT = 10
MAX_RESULT_COUNT = 50
SEARCH_CACHE_TTL = 1800.0

NEWS_KEYWORDS = (
    "news", "breaking", "latest", "update", "report", "today",
    "yesterday", "recent", "current", "live", "developing",
)

NEWS_DOMAINS = (
    "cnn.com", "bbc.com", "reuters.com", "ap.org", "npr.org",
    "news.google.com", "abcnews.go.com", "cbsnews.com", "nbcnews.com",
    "foxnews.com", "washingtonpost.com", "nytimes.com", "wsj.com",
)


@dataclass(frozen=True)
class SearchHit:
    rank: int
    title: str
    url: str
    snippet: str

    @property
    def display_url(self) -> str:
        if not self.url or self.url == "#":
            return "N/A"
        parsed = urlparse(self.url)
        if not parsed.hostname:
            return self.url
        return parsed.hostname + (parsed.path if parsed.path not in ("", "/") else "")


@dataclass(frozen=True)
class SearchResult:
    query: str
    hits: list[SearchHit] = field(default_factory=list)
    kind: str = "web"
    error: GatewayError | None = None

    @property
    def success(self) -> bool:
        return self.error is None


def _result_items(data: Any) -> list:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in ("results", "items", "organic"):
            if isinstance(data.get(key), list):
                return data[key]
    return []


def parse_hits(data: Any, limit: int) -> list[SearchHit]:
    """Normalize an upstream result list into SearchHits."""
    hits = []
    for index, item in enumerate(_result_items(data)[:limit]):
        if not isinstance(item, dict):
            continue
        hits.append(
            SearchHit(
                rank=index + 1,
                title=item.get("title") or item.get("name") or f"Result {index + 1}",
                url=item.get("url") or item.get("link") or item.get("href") or "#",
                snippet=item.get("snippet")
                or item.get("description")
                or item.get("summary")
                or "No description available",
            )
        )
    return hits


def is_news_hit(hit: SearchHit) -> bool:
    text = f"{hit.title} {hit.snippet}".lower()
    return any(k in text for k in NEWS_KEYWORDS) or any(d in hit.url for d in NEWS_DOMAINS)


class SearchService:
    service = "google_search"

    def __init__(self, executor: RequestExecutor) -> None:
        self._executor = executor

    async def search(self, query: str, num_results: int = DEFAULT_RESULT_COUNT) -> SearchResult:
        query = (query or "").strip()
        if not query:
            return SearchResult(
                query=query,
                error=GatewayError(ErrorKind.VALIDATION, "Search query cannot be empty"),
            )

        num_results = max(1, min(num_results, MAX_RESULT_COUNT))
        response = await self._executor.execute(
            RequestSpec(
                url=self._executor.registry.endpoint_url(self.service, "search"),
                service=self.service,
                params={"q": query, "num": num_results},
                cache=True,
                cache_ttl=SEARCH_CACHE_TTL,
            )
        )
        if not response.success:
            return SearchResult(query=query, error=response.error)

        return SearchResult(query=query, hits=parse_hits(response.data, num_results))

    async def news(self, topic: str, num_results: int = DEFAULT_RESULT_COUNT) -> SearchResult:
        """News search: web search with news terms, filtered to news-like hits."""
        topic = (topic or "").strip() or "latest news"
        result = await self.search(f"{topic} news latest updates", num_results)
        if not result.success:
            return SearchResult(query=topic, kind="news", error=result.error)

        hits = [h for h in result.hits if is_news_hit(h)]
        logger.debug(f"News filter kept {len(hits)}/{len(result.hits)} hits for '{topic}'")
        return SearchResult(query=topic, hits=hits, kind="news")
