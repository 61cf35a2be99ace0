"""
Dispatch context, reply types and the preference store boundary.

SessionContext is a read-only snapshot handed to handlers. Preference
changes go through the PreferenceStore, never through the snapshot.
"""

import threading
from dataclasses import dataclass, replace
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class SessionContext:
    """
    Read-only view of one user's preferences.

    Attributes:
        user_id: Transport-level user identifier
        preferred_provider: Chat provider name, None = configured default
        tts_voice: Voice name, None = configured default
        language: Default language code
        username: Display name, if known
    """

    user_id: str
    preferred_provider: str | None = None
    tts_voice: str | None = None
    language: str = "en"
    username: str | None = None


@runtime_checkable
class PreferenceStore(Protocol):
    """User preference persistence owned outside the core."""

    async def get_session(self, user_id: str, username: str | None = None) -> SessionContext:
        ...

    async def set_preferred_provider(self, user_id: str, provider: str) -> None:
        ...

    async def set_tts_voice(self, user_id: str, voice: str) -> None:
        ...

    async def set_language(self, user_id: str, language: str) -> None:
        ...


class InMemoryPreferenceStore:
    """
    Process-local PreferenceStore.

    Suitable for the demo console, tests and single-process deployments.
    """

    def __init__(self, default_language: str = "en") -> None:
        self._sessions: dict[str, SessionContext] = {}
        self._default_language = default_language
        self._lock = threading.Lock()

    def _current(self, user_id: str) -> SessionContext:
        return self._sessions.get(user_id) or SessionContext(
            user_id=user_id, language=self._default_language
        )

    def _update(self, user_id: str, **changes) -> None:
        with self._lock:
            self._sessions[user_id] = replace(self._current(user_id), **changes)

    async def get_session(self, user_id: str, username: str | None = None) -> SessionContext:
        with self._lock:
            session = self._current(user_id)
            if username and session.username != username:
                session = replace(session, username=username)
            self._sessions[user_id] = session
            return session

    async def set_preferred_provider(self, user_id: str, provider: str) -> None:
        self._update(user_id, preferred_provider=provider)

    async def set_tts_voice(self, user_id: str, voice: str) -> None:
        self._update(user_id, tts_voice=voice)

    async def set_language(self, user_id: str, language: str) -> None:
        self._update(user_id, language=language)

    def seed(self, session: SessionContext) -> None:
        """Install a session snapshot directly (fixtures, imports)."""
        with self._lock:
            self._sessions[session.user_id] = session

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


@dataclass(frozen=True)
class DispatchContext:
    raw_text: str
    session: SessionContext
    preferences: PreferenceStore


@dataclass(frozen=True)
class TextReply:
    value: str
    kind: str = "text"


@dataclass(frozen=True)
class MediaReply:
    url: str
    caption: str = ""
    media_type: str = "image"
    kind: str = "media"


HandlerResult = TextReply | MediaReply


def as_reply(result: HandlerResult | str) -> HandlerResult:
    """Wrap bare strings returned by handlers."""
    if isinstance(result, (TextReply, MediaReply)):
        return result
    return TextReply(str(result))
