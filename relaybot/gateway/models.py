"""
Gateway data types.

RequestSpec describes one outbound call. NormalizedResponse is the only
thing the RequestExecutor ever returns: either a tagged payload or a
GatewayError, never both and never neither.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Failure taxonomy shared by the gateway, routers and services."""

    TRANSPORT = "transport"  # connection errors and timeouts, retryable
    HTTP_STATUS = "http_status"  # non-2xx, terminal
    RATE_LIMITED = "rate_limited"  # no network attempt made
    VALIDATION = "validation"  # bad input, no network attempt made
    CHAIN_EXHAUSTED = "chain_exhausted"  # every fallback provider failed
    DECODE = "decode"  # 2xx body with no usable content
    UNEXPECTED = "unexpected"


class PayloadKind(str, Enum):
    JSON = "json"
    TEXT = "text"
    BINARY = "binary"


BODY_EXCERPT_CHARS = 200


@dataclass(frozen=True)
class ProviderFailure:
    """One provider's terminal error inside an exhausted chain."""

    provider: str
    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class GatewayError:
    """
    Description of a failed call.

    Attributes:
        kind: Failure category
        message: Human-readable description (safe for logs, not for users)
        status_code: HTTP status for HTTP_STATUS failures
        body_excerpt: First characters of the upstream error body
        attempts: Network attempts made before giving up
        failures: Per-provider breakdown for CHAIN_EXHAUSTED
    """

    kind: ErrorKind
    message: str
    status_code: int | None = None
    body_excerpt: str | None = None
    attempts: int = 0
    failures: tuple[ProviderFailure, ...] = ()

    def describe(self) -> str:
        """Short user-facing description of the failure kind."""
        match self.kind:
            case ErrorKind.RATE_LIMITED:
                return "rate limit reached, please try again shortly"
            case ErrorKind.TRANSPORT:
                return "the service could not be reached"
            case ErrorKind.HTTP_STATUS:
                return f"the service answered with status {self.status_code}"
            case ErrorKind.VALIDATION:
                return self.message
            case ErrorKind.CHAIN_EXHAUSTED:
                return "all providers are currently unavailable"
            case ErrorKind.DECODE:
                return "the service returned an unreadable response"
            case _:
                return "an unexpected error occurred"


@dataclass(frozen=True)
class Payload:
    """Tagged response body."""

    kind: PayloadKind
    value: Any
    content_type: str | None = None

    @classmethod
    def json(cls, value: Any) -> "Payload":
        return cls(PayloadKind.JSON, value)

    @classmethod
    def text(cls, value: str) -> "Payload":
        return cls(PayloadKind.TEXT, value)

    @classmethod
    def binary(cls, value: bytes, content_type: str) -> "Payload":
        return cls(PayloadKind.BINARY, value, content_type)

    @property
    def is_structured(self) -> bool:
        """True when the value is parsed JSON (dict, list, scalar)."""
        return self.kind == PayloadKind.JSON


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class NormalizedResponse:
    """
    Universal return type of RequestExecutor.execute().

    Exactly one of payload / error is set.
    """

    service: str
    payload: Payload | None = None
    error: GatewayError | None = None
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if (self.payload is None) == (self.error is None):
            raise ValueError("NormalizedResponse needs exactly one of payload or error")

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def ok(cls, service: str, payload: Payload) -> "NormalizedResponse":
        return cls(service=service, payload=payload)

    @classmethod
    def fail(
        cls,
        service: str,
        kind: ErrorKind,
        message: str,
        **details: Any,
    ) -> "NormalizedResponse":
        return cls(service=service, error=GatewayError(kind, message, **details))

    @property
    def data(self) -> Any:
        """Payload value, or None on failure."""
        return self.payload.value if self.payload is not None else None


@dataclass
class RequestSpec:
    """
    One outbound call.

    Attributes:
        url: Full endpoint URL (query params are merged in by the executor)
        service: Registry key owning the call (drives timeout/retry/limit)
        method: HTTP method
        headers: Extra headers, overriding the defaults
        body: JSON body (dict/list), raw string body, or None
        params: Query parameters; None values are dropped
        cache: Whether a successful GET may be served from / stored in cache
        cache_ttl: Cache lifetime in seconds (None = settings default)
    """

    url: str
    service: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    body: dict | list | str | None = None
    params: dict[str, Any] = field(default_factory=dict)
    cache: bool = False
    cache_ttl: float | None = None

    def serialized_body(self) -> str:
        """Stable body text used for cache keys."""
        if self.body is None:
            return ""
        if isinstance(self.body, str):
            return self.body
        return json.dumps(self.body, sort_keys=True, separators=(",", ":"))
