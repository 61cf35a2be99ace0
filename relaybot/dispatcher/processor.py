"""
Message Processor - per-message state machine.

RAW text is classified once; commands go through the CommandDispatcher and
implicit intents (video link, phone number, translation phrase, chat) go
through the same guarded boundary, so every path yields exactly one reply.
"""

import logging
import time

from relaybot.config import Settings
from relaybot.dispatcher.classifier import Classification, Intent, MessageClassifier
from relaybot.dispatcher.commands import CommandDispatcher
from relaybot.dispatcher.context import (
    DispatchContext,
    HandlerResult,
    PreferenceStore,
    TextReply,
)
from relaybot.dispatcher.handlers import CommandHandlers
from relaybot.services import ServiceBundle

logger = logging.getLogger(__name__)


class MessageProcessor:
    """
    Entry point for inbound messages.

    Usage:
        processor = MessageProcessor(services, InMemoryPreferenceStore(), settings)
        reply = await processor.process("user-1", "/translate es Hello")
    """

    def __init__(
        self,
        services: ServiceBundle,
        preferences: PreferenceStore,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or services.executor.settings
        self.preferences = preferences
        self.classifier = MessageClassifier(command_prefix=self._settings.command_prefix)
        self.dispatcher = CommandDispatcher(prefix=self._settings.command_prefix)
        self.handlers = CommandHandlers(services, self._settings)
        self.handlers.register_all(self.dispatcher)

    async def process(
        self, user_id: str, text: str, username: str | None = None
    ) -> HandlerResult:
        """
        Produce the reply for one inbound message.

        Args:
            user_id: Transport-level user identifier
            text: Raw message text
            username: Display name, if the transport knows it

        Returns:
            TextReply or MediaReply. Never raises for handler faults.
        """
        start_time = time.perf_counter()

        if not text or not text.strip():
            return TextReply(f"Send me a message, or type {self._settings.command_prefix}help.")

        session = await self.preferences.get_session(user_id, username)
        context = DispatchContext(raw_text=text, session=session, preferences=self.preferences)
        classification = self.classifier.classify(text)

        reply = await self._route(classification, context)

        latency_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"Processed message: user={user_id}, intent={classification.intent.value}, "
            f"reply={reply.kind}, latency={latency_ms:.0f}ms"
        )
        return reply

    async def _route(
        self, classification: Classification, context: DispatchContext
    ) -> HandlerResult:
        handlers = self.handlers
        guard = self.dispatcher.run_guarded

        match classification.intent:
            case Intent.COMMAND:
                return await self.dispatcher.dispatch(classification.text, context)
            case Intent.YOUTUBE:
                return await guard(
                    handlers.youtube_intent, context, [classification.url], label="youtube"
                )
            case Intent.PHONE:
                return await guard(
                    handlers.phone_intent, context, [classification.phone_number], label="phone"
                )
            case Intent.TRANSLATION:
                return await guard(
                    handlers.translation_intent,
                    context,
                    [classification.target_language, classification.phrase],
                    label="translation",
                )
            case _:
                return await guard(
                    handlers.chat_intent, context, [classification.text], label="chat"
                )
