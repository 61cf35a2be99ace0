"""
Image generation via a prompt URL.

The image service renders on GET of /prompt/<prompt>, so the reply is the
URL itself and the transport fetches it. The call still counts against the
service's rate window.
"""

import logging
from dataclasses import dataclass
from urllib.parse import quote

from relaybot.gateway import ErrorKind, GatewayError, RequestExecutor

logger = logging.getLogger(__name__)

MAX_PROMPT_CHARS = 500


@dataclass(frozen=True)
class ImageResult:
    prompt: str
    url: str | None = None
    error: GatewayError | None = None

    @property
    def success(self) -> bool:
        return self.error is None


class ImageService:
    service = "image_generation"

    def __init__(self, executor: RequestExecutor) -> None:
        self._executor = executor

    async def generate(self, prompt: str) -> ImageResult:
        prompt = (prompt or "").strip()
        if not prompt:
            return ImageResult(
                prompt=prompt,
                error=GatewayError(ErrorKind.VALIDATION, "Prompt cannot be empty"),
            )
        if len(prompt) > MAX_PROMPT_CHARS:
            return ImageResult(
                prompt=prompt,
                error=GatewayError(
                    ErrorKind.VALIDATION,
                    f"Prompt too long (max {MAX_PROMPT_CHARS} characters)",
                ),
            )

        descriptor = self._executor.registry.require(self.service)
        allowed = self._executor.rate_limiter.record_and_check(
            self.service,
            descriptor.rate_limit.max_requests,
            descriptor.rate_limit.window_seconds,
        )
        if not allowed:
            return ImageResult(
                prompt=prompt,
                error=GatewayError(
                    ErrorKind.RATE_LIMITED, f"Rate limit exceeded for {self.service}"
                ),
            )

        url = descriptor.endpoint_url("prompt") + quote(prompt, safe="")
        logger.info(f"Image generation URL built for prompt of {len(prompt)} chars")
        return ImageResult(prompt=prompt, url=url)
