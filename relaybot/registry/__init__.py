"""
Registry module: Upstream service table.

This module contains:
- services.py: provider descriptors with endpoints, timeouts, retry budgets
  and rate limits

Public API:
- ServiceCategory: Enum for capability groups
- RateLimitConfig: Fixed-window limit for one service
- ServiceDescriptor: Pydantic model for one provider
- ServiceRegistry: Central registry class
- get_service_registry: Singleton accessor function
"""

from relaybot.registry.services import (
    TTS_VOICES,
    RateLimitConfig,
    ServiceCategory,
    ServiceDescriptor,
    ServiceRegistry,
    UnknownEndpointError,
    UnknownServiceError,
    get_service_registry,
)

__all__ = [
    "TTS_VOICES",
    "ServiceCategory",
    "RateLimitConfig",
    "ServiceDescriptor",
    "ServiceRegistry",
    "UnknownServiceError",
    "UnknownEndpointError",
    "get_service_registry",
]
