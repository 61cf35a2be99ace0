"""
Schemas module: Pydantic request/response models.

This module provides validated data models for the RelayBot API:
- Request/response models for the /messages endpoint
- Registry and gateway statistics views
- Error response models for consistent error handling
- Health check response models

Example usage:
    from relaybot.schemas import MessageRequest, message_response_from_reply

    request = MessageRequest(user_id="u1", text="/help")
    response = message_response_from_reply(reply, latency_ms=12.5)
"""

from relaybot.schemas.messages import (
    # Message models
    MessageRequest,
    MessageResponse,
    message_response_from_reply,
    # Registry / gateway models
    CacheClearResponse,
    CacheStats,
    GatewayStatsResponse,
    RateLimitInfo,
    RateWindowStatus,
    ServiceInfo,
    ServicesResponse,
    # Error models
    ErrorCodes,
    ErrorDetail,
    ErrorResponse,
    # Health models
    ComponentHealth,
    HealthResponse,
)

__all__ = [
    # Message models
    "MessageRequest",
    "MessageResponse",
    "message_response_from_reply",
    # Registry / gateway models
    "ServiceInfo",
    "ServicesResponse",
    "RateLimitInfo",
    "CacheStats",
    "RateWindowStatus",
    "GatewayStatsResponse",
    "CacheClearResponse",
    # Error models
    "ErrorCodes",
    "ErrorDetail",
    "ErrorResponse",
    # Health models
    "ComponentHealth",
    "HealthResponse",
]
