"""
Message Classifier - pattern-based intent detection.

Precedence is fixed and the first match wins:
1. Command prefix
2. YouTube URL
3. Phone number
4. Translation phrasing ("translate X to Y", "how do you say X in Y",
   "what is X in Y")
5. Default chat

A youtu.be link can also pass the lax phone check (its video id may hold
enough digits); the URL check runs first, so it is classified as a video.
Only messages shaped like a dialled number (digits, spaces, "+", "-", "(", ")"
and ".") reach the phone check, so sentences that happen to carry digits
fall through to chat.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from relaybot.services.media import YOUTUBE_URL_PATTERN
from relaybot.services.phone import normalize_phone_number
from relaybot.services.translation import resolve_language

logger = logging.getLogger(__name__)


class Intent(str, Enum):
    COMMAND = "command"
    YOUTUBE = "youtube"
    PHONE = "phone"
    TRANSLATION = "translation"
    CHAT = "chat"


PHONE_SHAPE = re.compile(r"^\+?[\d\s().-]+$")

TRANSLATION_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"translate\s+(.+?)\s+to\s+(\w+)", re.IGNORECASE),
    re.compile(r"how do you say\s+(.+?)\s+in\s+(\w+)", re.IGNORECASE),
    re.compile(r"what is\s+(.+?)\s+in\s+(\w+)", re.IGNORECASE),
)


@dataclass(frozen=True)
class Classification:
    intent: Intent
    text: str
    url: str | None = None
    phone_number: str | None = None
    phrase: str | None = None
    target_language: str | None = None


class MessageClassifier:
    """
    Classifies one inbound message.

    Args:
        command_prefix: Prefix marking explicit commands
        language_resolver: Maps a captured language word to a code; a
            translation phrase only matches when the language resolves
    """

    def __init__(
        self,
        command_prefix: str = "/",
        language_resolver: Callable[[str], str | None] = resolve_language,
    ) -> None:
        self._prefix = command_prefix
        self._resolve_language = language_resolver

    def classify(self, text: str) -> Classification:
        stripped = (text or "").strip()

        if stripped.startswith(self._prefix):
            return Classification(Intent.COMMAND, stripped)

        if YOUTUBE_URL_PATTERN.match(stripped):
            return Classification(Intent.YOUTUBE, stripped, url=stripped)

        phone = normalize_phone_number(stripped) if PHONE_SHAPE.match(stripped) else None
        if phone is not None:
            return Classification(Intent.PHONE, stripped, phone_number=phone)

        translation = self._match_translation(stripped)
        if translation is not None:
            return translation

        return Classification(Intent.CHAT, stripped)

    def _match_translation(self, text: str) -> Classification | None:
        for pattern in TRANSLATION_PATTERNS:
            match = pattern.search(text)
            if match is None:
                continue
            phrase = match.group(1).strip().strip("\"'")
            language = self._resolve_language(match.group(2))
            if phrase and language:
                return Classification(
                    Intent.TRANSLATION, text, phrase=phrase, target_language=language
                )
            logger.debug(f"Translation phrasing without a known language: {match.group(2)}")
        return None
