"""
Phone number lookup and device specifications.

normalize_phone_number() keeps the lax cleanup used for intent detection:
everything except digits and "+" is stripped, a number without "+" needs at
least ten digits and gets "+" prefixed, and the result must look like E.164.
"""

import logging
import re
from dataclasses import dataclass, field

from relaybot.gateway import ErrorKind, GatewayError, RequestExecutor, RequestSpec

logger = logging.getLogger(__name__)

E164_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")
_NON_PHONE_CHARS = re.compile(r"[^\d+]")

PHONE_CACHE_TTL = 1800.0
SPECS_CACHE_TTL = 86400.0

DEVICE_FIELDS = (
    ("Display", ("display", "screen")),
    ("Processor", ("processor", "cpu", "chipset")),
    ("Memory", ("memory", "ram")),
    ("Storage", ("storage", "internal_storage")),
    ("Camera", ("camera", "main_camera")),
    ("Battery", ("battery",)),
    ("OS", ("os", "operating_system")),
)


def normalize_phone_number(raw: str | None) -> str | None:
    """Cleaned E.164-looking number, or None when it cannot be one."""
    if not raw or not isinstance(raw, str):
        return None
    cleaned = _NON_PHONE_CHARS.sub("", raw)
    if not cleaned.startswith("+"):
        if len(cleaned) < 10:
            return None
        cleaned = "+" + cleaned
    if E164_PATTERN.match(cleaned):
        return cleaned
    return None


def is_phone_number(raw: str | None) -> bool:
    return normalize_phone_number(raw) is not None


@dataclass(frozen=True)
class PhoneLookup:
    number: str
    name: str = "Unknown"
    carrier: str = "Unknown"
    location: str = "Unknown"
    country_code: str = "Unknown"
    line_type: str = "Unknown"
    spam_score: int = 0
    tags: list[str] = field(default_factory=list)
    error: GatewayError | None = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class PhoneSpecs:
    """Device specifications for a phone model."""

    query: str
    name: str = "Unknown"
    brand: str = "Unknown"
    price: str = "Unknown"
    specifications: dict[str, str] = field(default_factory=dict)
    error: GatewayError | None = None

    @property
    def success(self) -> bool:
        return self.error is None


class PhoneService:
    service = "truecaller"
    info_service = "phone_info"

    def __init__(self, executor: RequestExecutor) -> None:
        self._executor = executor

    async def lookup(self, raw_number: str) -> PhoneLookup:
        number = normalize_phone_number(raw_number)
        if number is None:
            return PhoneLookup(
                number=raw_number or "",
                error=GatewayError(
                    ErrorKind.VALIDATION,
                    "Invalid phone number format. Please include country code "
                    "(e.g., +1234567890)",
                ),
            )

        response = await self._executor.execute(
            RequestSpec(
                url=self._executor.registry.endpoint_url(self.service, "lookup"),
                service=self.service,
                params={"q": number},
                cache=True,
                cache_ttl=PHONE_CACHE_TTL,
            )
        )
        if not response.success:
            return PhoneLookup(number=number, error=response.error)

        data = response.data
        if isinstance(data, dict) and isinstance(data.get("data"), dict):
            data = data["data"]
        if not isinstance(data, dict) or not data:
            return PhoneLookup(
                number=number,
                error=GatewayError(ErrorKind.DECODE, "No information found for this number"),
            )

        try:
            spam_score = int(data.get("spamScore") or 0)
        except (TypeError, ValueError):
            spam_score = 0
        tags = data.get("tags") if isinstance(data.get("tags"), list) else []

        return PhoneLookup(
            number=number,
            name=data.get("name") or "Unknown",
            carrier=data.get("carrier") or "Unknown",
            location=data.get("location") or "Unknown",
            country_code=data.get("countryCode") or "Unknown",
            line_type=data.get("type") or "Unknown",
            spam_score=spam_score,
            tags=[str(t) for t in tags],
        )

    async def info(self, model: str) -> PhoneSpecs:
        """Look up device specifications for a phone model."""
        query = (model or "").strip()
        if not query:
            return PhoneSpecs(
                query="",
                error=GatewayError(ErrorKind.VALIDATION, "Phone model cannot be empty"),
            )

        response = await self._executor.execute(
            RequestSpec(
                url=self._executor.registry.endpoint_url(self.info_service, "info"),
                service=self.info_service,
                params={"query": query},
                cache=True,
                cache_ttl=SPECS_CACHE_TTL,
            )
        )
        if not response.success:
            return PhoneSpecs(query=query, error=response.error)

        data = response.data
        if isinstance(data, dict) and isinstance(data.get("data"), dict):
            data = data["data"]
        if not isinstance(data, dict) or not data:
            return PhoneSpecs(
                query=query,
                error=GatewayError(ErrorKind.DECODE, f"No specifications found for {query}"),
            )

        specs = data.get("specs") or data.get("specifications") or data
        if not isinstance(specs, dict):
            specs = {}
        specifications = {}
        for label, keys in DEVICE_FIELDS:
            value = next((specs[k] for k in keys if specs.get(k)), None)
            if value is not None:
                specifications[label] = str(value)

        return PhoneSpecs(
            query=query,
            name=str(data.get("name") or data.get("model") or data.get("title") or "Unknown"),
            brand=str(data.get("brand") or data.get("manufacturer") or "Unknown"),
            price=str(data.get("price") or data.get("cost") or "Unknown"),
            specifications=specifications,
        )
