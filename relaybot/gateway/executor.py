"""
Request Executor - the single path every outbound call goes through.

For each RequestSpec the executor:
1. Resolves the final URL (non-None query params merged in)
2. Serves eligible GETs from the ResponseCache
3. Checks the owning service's rate window
4. Sends the request over a shared httpx.AsyncClient, retrying only
   transport-level failures with capped exponential backoff
5. Turns non-2xx answers into terminal HTTP_STATUS failures
6. Classifies 2xx bodies by content type (json / text / binary)
7. Stores eligible successes in the cache

execute() never raises. Every outcome, including unexpected faults, comes
back as a NormalizedResponse.
"""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable

import httpx

from relaybot.config import Settings, get_settings
from relaybot.gateway.cache import ResponseCache
from relaybot.gateway.models import (
    BODY_EXCERPT_CHARS,
    ErrorKind,
    NormalizedResponse,
    Payload,
    RequestSpec,
)
from relaybot.gateway.rate_limiter import RateLimiter
from relaybot.registry import ServiceRegistry, get_service_registry

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


def resolve_url(url: str, params: dict | None) -> str:
    """
    Append non-None query parameters to a URL.

    Raises:
        httpx.InvalidURL: If the URL cannot be parsed.
    """
    filtered = {k: v for k, v in (params or {}).items() if v is not None}
    if not filtered:
        return str(httpx.URL(url))
    return str(httpx.URL(url).copy_merge_params(filtered))


def cache_key(method: str, resolved_url: str, body: str) -> str:
    """Cache key derived from method, resolved URL and serialized body."""
    return f"{method}:{resolved_url}:{body}"


def _is_json_content_type(mime: str) -> bool:
    return mime == "application/json" or mime.endswith("+json")


class RequestExecutor:
    """
    Resilient HTTP executor owning its cache and rate limiter.

    Instances are built by the caller (the application lifespan, a test, the
    demo console); nothing here is module-global, so independent executors
    never share state.

    Usage:
        executor = RequestExecutor()
        response = await executor.execute(RequestSpec(url=..., service="weather"))
        await executor.aclose()
    """

    def __init__(
        self,
        registry: ServiceRegistry | None = None,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        cache: ResponseCache | None = None,
        rate_limiter: RateLimiter | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self._settings = settings if settings is not None else get_settings()
        self._registry = registry if registry is not None else get_service_registry()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            transport=transport, follow_redirects=True
        )
        if cache is None:
            cache = ResponseCache(max_entries=self._settings.cache_max_entries)
        self.cache = cache
        self.rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter()
        self._sleep = sleep

    @property
    def registry(self) -> ServiceRegistry:
        return self._registry

    @property
    def settings(self) -> Settings:
        return self._settings

    def backoff_delay(self, attempt: int) -> float:
        """Delay slept after failed attempt number `attempt` (1-based)."""
        return min(
            self._settings.retry_base_delay * 2 ** (attempt - 1),
            self._settings.retry_max_delay,
        )

    async def execute(self, spec: RequestSpec) -> NormalizedResponse:
        """
        Execute one request.

        Args:
            spec: The outbound call description.

        Returns:
            NormalizedResponse carrying either a payload or a GatewayError.
        """
        try:
            return await self._execute(spec)
        except Exception as e:
            logger.exception(f"Unexpected gateway failure for {spec.service}")
            return NormalizedResponse.fail(
                spec.service, ErrorKind.UNEXPECTED, f"{type(e).__name__}: {e}"
            )

    async def _execute(self, spec: RequestSpec) -> NormalizedResponse:
        service = spec.service
        method = spec.method.upper()

        try:
            url = resolve_url(spec.url, spec.params)
        except httpx.InvalidURL as e:
            return NormalizedResponse.fail(
                service, ErrorKind.VALIDATION, f"Invalid URL: {e}"
            )

        key = cache_key(method, url, spec.serialized_body())
        cacheable = spec.cache and method == "GET"

        if cacheable:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug(f"Cache hit for {service}: {url}")
                return cached

        descriptor = self._registry.get(service)
        if descriptor is not None:
            allowed = self.rate_limiter.record_and_check(
                service,
                descriptor.rate_limit.max_requests,
                descriptor.rate_limit.window_seconds,
            )
            if not allowed:
                logger.warning(f"Rate limit exceeded for {service}")
                return NormalizedResponse.fail(
                    service,
                    ErrorKind.RATE_LIMITED,
                    f"Rate limit exceeded for {service}",
                )
            timeout = descriptor.timeout_seconds
            max_retries = descriptor.max_retries
        else:
            timeout = self._settings.default_timeout_seconds
            max_retries = self._settings.default_max_retries

        headers = {
            "Content-Type": "application/json",
            "User-Agent": self._settings.user_agent,
        }
        headers.update(spec.headers)

        try:
            response, attempts, last_error = await asyncio.wait_for(
                self._send_with_retry(
                    method, url, headers, spec.body, timeout, max_retries, service
                ),
                timeout=self._settings.request_deadline_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(
                f"{service} exceeded the call deadline of "
                f"{self._settings.request_deadline_seconds}s"
            )
            return NormalizedResponse.fail(
                service,
                ErrorKind.TRANSPORT,
                f"Call deadline of {self._settings.request_deadline_seconds}s exceeded",
            )

        if response is None:
            logger.error(f"{service} failed after {attempts} attempts: {last_error}")
            return NormalizedResponse.fail(
                service,
                ErrorKind.TRANSPORT,
                f"Transport failure after {attempts} attempts: {last_error}",
                attempts=attempts,
            )

        if not response.is_success:
            logger.error(f"{service} returned HTTP {response.status_code}")
            return NormalizedResponse.fail(
                service,
                ErrorKind.HTTP_STATUS,
                f"HTTP {response.status_code} from {service}",
                status_code=response.status_code,
                body_excerpt=response.text[:BODY_EXCERPT_CHARS],
                attempts=attempts,
            )

        normalized = self._normalize(service, response)

        if normalized.success and cacheable:
            ttl = spec.cache_ttl or self._settings.default_cache_ttl
            self.cache.set(key, normalized, ttl)

        return normalized

    async def _send_with_retry(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: dict | list | str | None,
        timeout: float,
        max_retries: int,
        service: str,
    ) -> tuple[httpx.Response | None, int, Exception | None]:
        """
        Send with retry on transport errors only.

        Returns:
            (response or None, attempts made, last transport error)
        """
        attempts_allowed = max(1, max_retries)
        last_error: Exception | None = None

        for attempt in range(1, attempts_allowed + 1):
            try:
                if isinstance(body, str):
                    response = await self._client.request(
                        method, url, headers=headers, content=body, timeout=timeout
                    )
                else:
                    response = await self._client.request(
                        method, url, headers=headers, json=body, timeout=timeout
                    )
                return response, attempt, None
            except httpx.TransportError as e:
                last_error = e
                if attempt < attempts_allowed:
                    delay = self.backoff_delay(attempt)
                    logger.warning(
                        f"{service} transport error (attempt {attempt}/{attempts_allowed}), "
                        f"retrying in {delay}s: {type(e).__name__}"
                    )
                    await self._sleep(delay)

        return None, attempts_allowed, last_error

    def _normalize(self, service: str, response: httpx.Response) -> NormalizedResponse:
        """Classify a 2xx response by its content type."""
        content_type = response.headers.get("content-type", "")
        mime = content_type.split(";")[0].strip().lower()

        if _is_json_content_type(mime):
            try:
                return NormalizedResponse.ok(service, Payload.json(response.json()))
            except ValueError as e:
                logger.error(f"{service} sent invalid JSON: {e}")
                return NormalizedResponse.fail(
                    service,
                    ErrorKind.DECODE,
                    f"Invalid JSON body: {e}",
                    body_excerpt=response.text[:BODY_EXCERPT_CHARS],
                )

        if mime.startswith("text/"):
            text = response.text
            if text.strip().startswith(("{", "[")):
                try:
                    return NormalizedResponse.ok(service, Payload.json(json.loads(text)))
                except ValueError:
                    pass
            return NormalizedResponse.ok(service, Payload.text(text))

        return NormalizedResponse.ok(
            service,
            Payload.binary(response.content, content_type or "application/octet-stream"),
        )

    def clear_cache(self) -> int:
        """Drop every cached response. Returns the number removed."""
        removed = self.cache.clear()
        logger.info(f"Cleared {removed} cached responses")
        return removed

    def stats(self) -> dict:
        """Cache statistics and rate-limit status."""
        return {
            "cache": self.cache.stats(),
            "rate_limits": self.rate_limiter.status(),
        }

    async def aclose(self) -> None:
        """Close the HTTP client if this executor created it."""
        if self._owns_client:
            await self._client.aclose()
