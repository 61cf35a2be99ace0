"""
Gateway module: Resilient outbound HTTP execution.

This module contains:
- models.py: RequestSpec, NormalizedResponse, Payload, GatewayError
- cache.py: TTL response cache with inline expiry sweep
- rate_limiter.py: Lazy fixed-window per-service limiter
- executor.py: RequestExecutor (cache, limit, retry, normalize)
"""

from relaybot.gateway.cache import CacheEntry, ResponseCache
from relaybot.gateway.executor import RequestExecutor, cache_key, resolve_url
from relaybot.gateway.models import (
    ErrorKind,
    GatewayError,
    NormalizedResponse,
    Payload,
    PayloadKind,
    ProviderFailure,
    RequestSpec,
)
from relaybot.gateway.rate_limiter import RateLimiter, RateWindow

__all__ = [
    # Data types
    "RequestSpec",
    "NormalizedResponse",
    "Payload",
    "PayloadKind",
    "GatewayError",
    "ErrorKind",
    "ProviderFailure",
    # State
    "ResponseCache",
    "CacheEntry",
    "RateLimiter",
    "RateWindow",
    # Execution
    "RequestExecutor",
    "resolve_url",
    "cache_key",
]
