"""
Dispatcher module: Message classification, command dispatch and handlers.

This module turns one inbound text message into one reply. Commands are
parsed and routed by the CommandDispatcher; other input is classified into
implicit intents by the MessageClassifier. Handler faults never escape.

Key exports:
- MessageProcessor: Per-message entry point
- MessageClassifier / Intent / Classification: Implicit intent detection
- CommandDispatcher / Command / parse_command: Explicit commands
- CommandHandlers: Handler implementations over the domain services
- SessionContext / PreferenceStore / InMemoryPreferenceStore: Session boundary
- TextReply / MediaReply: Reply types
"""

from relaybot.dispatcher.classifier import Classification, Intent, MessageClassifier
from relaybot.dispatcher.commands import (
    APOLOGY,
    Command,
    CommandDispatcher,
    ParsedCommand,
    parse_command,
)
from relaybot.dispatcher.context import (
    DispatchContext,
    HandlerResult,
    InMemoryPreferenceStore,
    MediaReply,
    PreferenceStore,
    SessionContext,
    TextReply,
    as_reply,
)
from relaybot.dispatcher.handlers import CommandHandlers
from relaybot.dispatcher.processor import MessageProcessor

__all__ = [
    # Processing
    "MessageProcessor",
    # Classification
    "MessageClassifier",
    "Intent",
    "Classification",
    # Commands
    "CommandDispatcher",
    "Command",
    "ParsedCommand",
    "parse_command",
    "CommandHandlers",
    "APOLOGY",
    # Context and replies
    "SessionContext",
    "PreferenceStore",
    "InMemoryPreferenceStore",
    "DispatchContext",
    "TextReply",
    "MediaReply",
    "HandlerResult",
    "as_reply",
]
