"""
Command Dispatcher - explicit command parsing and safe handler execution.

Input "/translate es Hello world" parses to command "translate" with args
["es", "Hello", "world"]. The command token is everything up to the first
whitespace and is matched case-insensitively; arguments are the
whitespace-split remainder.

The dispatcher is the last line of defense: any exception a handler raises
is logged with its traceback and turned into a generic apology, so one bad
message never stops the next one from being processed.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from relaybot.dispatcher.context import DispatchContext, HandlerResult, TextReply, as_reply

logger = logging.getLogger(__name__)

Handler = Callable[[DispatchContext, list[str]], Awaitable[HandlerResult | str]]

APOLOGY = "Sorry, something went wrong while processing your message. Please try again."


@dataclass(frozen=True)
class Command:
    """
    One registered command.

    Attributes:
        name: Command token without prefix (lowercase)
        handler: Async callable receiving the context and argument list
        usage: Usage text returned when required arguments are missing
        description: One-line summary for /help
        min_args: Required argument count
        aliases: Alternative tokens resolving to this command
    """

    name: str
    handler: Handler
    usage: str
    description: str
    min_args: int = 0
    aliases: tuple[str, ...] = ()


@dataclass(frozen=True)
class ParsedCommand:
    name: str
    args: list[str]
    remainder: str


def parse_command(text: str, prefix: str = "/") -> ParsedCommand | None:
    """Split prefixed input into command token and arguments."""
    stripped = (text or "").strip()
    if not stripped.startswith(prefix):
        return None

    body = stripped[len(prefix):]
    parts = body.split(maxsplit=1)
    if not parts:
        return ParsedCommand(name="", args=[], remainder="")

    remainder = parts[1] if len(parts) > 1 else ""
    return ParsedCommand(name=parts[0].lower(), args=remainder.split(), remainder=remainder)


class CommandDispatcher:
    """
    Registry of commands plus the guarded execution boundary.

    Usage:
        dispatcher = CommandDispatcher(prefix="/")
        dispatcher.register(Command("ping", ping_handler, "Usage: /ping", "Ping"))
        reply = await dispatcher.dispatch("/ping", context)
    """

    def __init__(self, prefix: str = "/") -> None:
        self.prefix = prefix
        self._commands: dict[str, Command] = {}
        self._lookup: dict[str, Command] = {}

    def register(self, command: Command) -> None:
        self._commands[command.name] = command
        self._lookup[command.name] = command
        for alias in command.aliases:
            self._lookup[alias] = command

    def get(self, name: str) -> Command | None:
        return self._lookup.get(name.lower())

    @property
    def commands(self) -> list[Command]:
        """Registered commands in registration order, aliases excluded."""
        return list(self._commands.values())

    def unknown_reply(self, token: str) -> TextReply:
        return TextReply(
            f"Unknown command: {self.prefix}{token}\n"
            f"Type {self.prefix}help to see available commands."
        )

    async def dispatch(self, text: str, context: DispatchContext) -> HandlerResult:
        """
        Parse and run one command.

        Returns:
            The handler's reply, the command's usage text when arguments are
            missing, an unknown-command reply, or the apology on failure.
        """
        parsed = parse_command(text, self.prefix)
        if parsed is None or not parsed.name:
            return self.unknown_reply(parsed.name if parsed else "")

        command = self.get(parsed.name)
        if command is None:
            logger.info(f"Unknown command: {parsed.name}")
            return self.unknown_reply(parsed.name)

        if len(parsed.args) < command.min_args:
            return TextReply(command.usage)

        logger.info(f"Dispatching command /{command.name} for {context.session.user_id}")
        return await self.run_guarded(command.handler, context, parsed.args, label=command.name)

    async def run_guarded(
        self,
        handler: Handler,
        context: DispatchContext,
        args: list[str],
        label: str = "handler",
    ) -> HandlerResult:
        """Run a handler, converting any exception into the apology reply."""
        try:
            return as_reply(await handler(context, args))
        except Exception:
            logger.exception(f"Handler '{label}' failed for {context.session.user_id}")
            return TextReply(APOLOGY)
