"""
Pydantic Schemas for the RelayBot API

This module defines the request and response models for the HTTP surface:
- MessageRequest / MessageResponse: one inbound message and its reply
- Service registry and gateway statistics views
- Error responses and health check schemas

All schemas follow Pydantic v2 patterns with field descriptions and
OpenAPI documentation support.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from relaybot.dispatcher.context import HandlerResult, MediaReply


# =============================================================================
# MESSAGE MODELS
# =============================================================================


class MessageRequest(BaseModel):
    """
    Request body for the /messages endpoint.

    Posted by the chat transport for every inbound text message.

    Example:
        {
            "user_id": "15551234567",
            "text": "/translate es Hello world",
            "username": "Alex"
        }
    """

    user_id: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="Transport-level user identifier",
    )

    text: str = Field(
        ...,
        min_length=1,
        max_length=10000,
        description="Raw message text",
    )

    username: str | None = Field(
        default=None,
        max_length=128,
        description="Display name, if the transport knows it",
    )

    @field_validator("text")
    @classmethod
    def validate_text_not_whitespace(cls, v: str) -> str:
        """Ensure text is not empty or whitespace only."""
        if not v.strip():
            raise ValueError("Text cannot be empty or whitespace only")
        return v

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"user_id": "15551234567", "text": "/translate es Hello world"},
                {"user_id": "15551234567", "text": "https://youtu.be/dQw4w9WgXcQ"},
            ]
        }
    )


class MessageResponse(BaseModel):
    """
    Reply for one inbound message.

    Text replies carry `text`; media replies carry `media_url`,
    `media_type` and a caption in `text`.
    """

    kind: Literal["text", "media"] = Field(..., description="Reply type")

    text: str = Field(..., description="Reply text, or media caption")

    media_url: str | None = Field(default=None, description="URL of media to send")

    media_type: str | None = Field(
        default=None, description="Media type (image, audio) for media replies"
    )

    latency_ms: float = Field(..., ge=0.0, description="Processing time in milliseconds")


def message_response_from_reply(reply: HandlerResult, latency_ms: float) -> MessageResponse:
    """Convert a dispatcher reply into the API response model."""
    if isinstance(reply, MediaReply):
        return MessageResponse(
            kind="media",
            text=reply.caption,
            media_url=reply.url,
            media_type=reply.media_type,
            latency_ms=latency_ms,
        )
    return MessageResponse(kind="text", text=reply.value, latency_ms=latency_ms)


# =============================================================================
# REGISTRY / GATEWAY MODELS
# =============================================================================


class RateLimitInfo(BaseModel):
    max_requests: int
    window_seconds: float


class ServiceInfo(BaseModel):
    """Public view of one ServiceDescriptor."""

    key: str
    display_name: str
    category: str
    base_url: str
    endpoints: dict[str, str]
    timeout_seconds: float
    max_retries: int
    rate_limit: RateLimitInfo
    requires_api_key: bool
    worst_case_latency_seconds: float = Field(
        ..., description="Every attempt timing out plus every backoff delay"
    )


class ServicesResponse(BaseModel):
    services: list[ServiceInfo]
    total_services: int


class CacheStats(BaseModel):
    total: int = Field(..., ge=0, description="Entries physically stored")
    valid: int = Field(..., ge=0, description="Entries not yet expired")
    expired: int = Field(..., ge=0, description="Expired entries awaiting removal")


class RateWindowStatus(BaseModel):
    count: int
    max: int
    window_seconds: float
    is_limited: bool
    seconds_until_reset: float


class GatewayStatsResponse(BaseModel):
    cache: CacheStats
    rate_limits: dict[str, RateWindowStatus]


class CacheClearResponse(BaseModel):
    cleared: int = Field(..., ge=0, description="Number of entries removed")


# =============================================================================
# ERROR MODELS
# =============================================================================


class ErrorCodes:
    """
    Standard error codes for API responses.

    These codes enable programmatic error handling by clients
    without parsing human-readable messages.
    """

    VALIDATION_ERROR = "VALIDATION_ERROR"
    PROCESSING_ERROR = "PROCESSING_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


class ErrorDetail(BaseModel):
    """
    Detailed error information for API error responses.

    Provides machine-readable error codes, human-readable messages,
    and optional field information for validation errors.
    """

    code: str = Field(
        ...,
        description="Machine-readable error code for programmatic handling",
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
    )

    field: str | None = Field(
        default=None,
        description="Field that caused the error (for validation errors)",
    )


class ErrorResponse(BaseModel):
    """
    Standard error response format for all API errors.

    Example:
        {
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Text cannot be empty",
                "field": "body.text"
            }
        }
    """

    error: ErrorDetail = Field(..., description="Error details")


# =============================================================================
# HEALTH MODELS
# =============================================================================


class ComponentHealth(BaseModel):
    """
    Health status of an individual system component.
    """

    name: str = Field(..., description="Component name (e.g., 'gateway', 'registry')")

    status: Literal["healthy", "degraded", "unhealthy"] = Field(
        ..., description="Component health status"
    )

    message: str | None = Field(
        default=None, description="Additional status information or error details"
    )


class HealthResponse(BaseModel):
    """
    Response from the /health endpoint.

    Example:
        {
            "status": "healthy",
            "service": "relaybot",
            "version": "0.1.0",
            "components": [{"name": "registry", "status": "healthy"}],
            "uptime_seconds": 3600.5
        }
    """

    status: Literal["healthy", "degraded", "unhealthy"] = Field(
        ..., description="Overall service health status"
    )

    service: str = Field(default="relaybot", description="Service identifier")

    version: str = Field(..., description="Application version")

    components: list[ComponentHealth] = Field(
        default_factory=list, description="Health status of individual components"
    )

    uptime_seconds: float | None = Field(
        default=None, ge=0.0, description="Time since service start in seconds"
    )
