"""
Dispatcher Handlers - command and intent handlers.

Each handler receives the DispatchContext and an argument list and returns
a TextReply, a MediaReply or a plain string. Expected failures arrive as
result values from the services and are rendered as short messages that
name the kind of failure; unexpected exceptions are left to the
dispatcher's guard.
"""

import logging

from relaybot.config import Settings
from relaybot.dispatcher.commands import Command, CommandDispatcher
from relaybot.dispatcher.context import DispatchContext, HandlerResult, MediaReply, TextReply
from relaybot.gateway import ErrorKind, GatewayError
from relaybot.providers import CHAT_DESCRIPTIONS, ChatProvider, parse_chat_provider
from relaybot.services import SUPPORTED_LANGUAGES, ServiceBundle, language_name, resolve_language
from relaybot.services.search import SearchResult

logger = logging.getLogger(__name__)

MAX_TRANSCRIPT_CHARS = 3000
SEARCH_RESULTS_SHOWN = 5
FORECAST_DAYS_SHOWN = 3


def _failure(action: str, error: GatewayError | None) -> str:
    detail = error.describe() if error is not None else "unknown error"
    return f"{action} failed: {detail}"


def _format_hits(result: SearchResult, heading: str) -> str:
    if not result.hits:
        return f'No results found for "{result.query}".'
    lines = [f'{heading} for "{result.query}":', ""]
    for hit in result.hits[:SEARCH_RESULTS_SHOWN]:
        lines.append(f"{hit.rank}. {hit.title}")
        lines.append(f"   {hit.snippet}")
        if hit.url != "#":
            lines.append(f"   {hit.display_url}")
        lines.append("")
    return "\n".join(lines).rstrip()


class CommandHandlers:
    """
    Handler implementations bound to one ServiceBundle.

    Usage:
        handlers = CommandHandlers(services, settings)
        handlers.register_all(dispatcher)
    """

    def __init__(self, services: ServiceBundle, settings: Settings) -> None:
        self._services = services
        self._settings = settings
        self._prefix = settings.command_prefix
        self._dispatcher: CommandDispatcher | None = None

    def current_provider(self, ctx: DispatchContext) -> ChatProvider:
        return self._services.router.resolve_chat_provider(ctx.session.preferred_provider)

    def register_all(self, dispatcher: CommandDispatcher) -> None:
        """Register the full command set on a dispatcher."""
        self._dispatcher = dispatcher
        p = self._prefix
        commands = [
            Command("start", self.start, f"Usage: {p}start", "Welcome message"),
            Command("help", self.help, f"Usage: {p}help", "Show this help"),
            Command(
                "ai",
                self.ai,
                f"Usage: {p}ai [model] <message>\nExample: {p}ai claude Explain recursion",
                "Chat with an AI model",
                min_args=1,
            ),
            Command(
                "model",
                self.model,
                f"Usage: {p}model <name>\nExample: {p}model gemini\n"
                f"Type {p}models to list available models.",
                "Set your preferred AI model",
                min_args=1,
            ),
            Command("models", self.models, f"Usage: {p}models", "List AI models"),
            Command(
                "translate",
                self.translate,
                f"Usage: {p}translate <target_language> <text>\n"
                f"Example: {p}translate es Hello world",
                "Translate text",
                min_args=2,
            ),
            Command("languages", self.languages, f"Usage: {p}languages", "List languages"),
            Command(
                "language",
                self.language,
                f"Usage: {p}language <code>\nExample: {p}language fr",
                "Set your default language",
                min_args=1,
            ),
            Command(
                "search",
                self.search,
                f"Usage: {p}search <query>\nExample: {p}search python asyncio",
                "Search the web",
                min_args=1,
            ),
            Command(
                "news",
                self.news,
                f"Usage: {p}news [topic]",
                "Latest news (optionally on a topic)",
            ),
            Command(
                "research",
                self.research,
                f"Usage: {p}research <topic>\nExample: {p}research quantum computing",
                "Search and summarize a topic",
                min_args=1,
            ),
            Command(
                "weather",
                self.weather,
                f"Usage: {p}weather <city>\nExample: {p}weather London",
                "Current weather for a city",
                min_args=1,
            ),
            Command(
                "youtube",
                self.youtube,
                f"Usage: {p}youtube <url> [summarize|transcribe]",
                "Summarize or transcribe a YouTube video",
                min_args=1,
            ),
            Command(
                "tts",
                self.tts,
                f"Usage: {p}tts <text> [voice]\nExample: {p}tts Hello there Matthew",
                "Convert text to speech",
                min_args=1,
            ),
            Command(
                "voice",
                self.voice,
                f"Usage: {p}voice <name>\nType {p}voices to list voices.",
                "Set your text-to-speech voice",
                min_args=1,
            ),
            Command("voices", self.voices, f"Usage: {p}voices", "List speech voices"),
            Command(
                "phone",
                self.phone,
                f"Usage: {p}phone <number>\nExample: {p}phone +1234567890",
                "Look up a phone number",
                min_args=1,
                aliases=("truecaller",),
            ),
            Command(
                "phoneinfo",
                self.phoneinfo,
                f"Usage: {p}phoneinfo <model>\nExample: {p}phoneinfo iPhone 15",
                "Look up phone specifications",
                min_args=1,
            ),
            Command(
                "generate_image",
                self.generate_image,
                f"Usage: {p}generate_image <prompt>\nExample: {p}generate_image a red fox",
                "Generate an image from a prompt",
                min_args=1,
                aliases=("image",),
            ),
            Command("settings", self.settings, f"Usage: {p}settings", "Show your settings"),
            Command("status", self.status, f"Usage: {p}status", "Service status"),
        ]
        for command in commands:
            dispatcher.register(command)

    # General

    async def start(self, ctx: DispatchContext, args: list[str]) -> str:
        name = ctx.session.username or "there"
        return (
            f"Welcome to RelayBot, {name}!\n"
            f"Current AI model: {self.current_provider(ctx).value}\n"
            f"Type {self._prefix}help to see what I can do."
        )

    async def help(self, ctx: DispatchContext, args: list[str]) -> str:
        lines = ["Available commands:", ""]
        commands = self._dispatcher.commands if self._dispatcher else []
        for command in commands:
            lines.append(f"{self._prefix}{command.name} - {command.description}")
        lines += [
            "",
            "You can also send:",
            "- a YouTube link to get a summary",
            "- a phone number for a lookup",
            '- "translate hello to spanish"',
            "- anything else to chat with your AI model",
        ]
        return "\n".join(lines)

    async def settings(self, ctx: DispatchContext, args: list[str]) -> str:
        session = ctx.session
        return "\n".join(
            [
                "Your settings:",
                f"AI model: {self.current_provider(ctx).value}",
                f"TTS voice: {session.tts_voice or self._settings.default_tts_voice}",
                f"Language: {session.language} ({language_name(session.language)})",
            ]
        )

    async def status(self, ctx: DispatchContext, args: list[str]) -> str:
        executor = self._services.executor
        credentials = {
            "gemini": self._settings.gemini_api_key is not None,
            "openai": self._settings.openai_api_key is not None,
        }
        lines = ["Service status:"]
        for descriptor in executor.registry.list_services():
            issues = executor.registry.validate(descriptor.key, credentials)
            state = "ok" if not issues else "; ".join(issues)
            lines.append(f"- {descriptor.display_name}: {state}")

        stats = executor.stats()
        limited = [s for s, w in stats["rate_limits"].items() if w["is_limited"]]
        lines += [
            "",
            f"Cached responses: {stats['cache']['valid']}",
            f"Rate limited: {', '.join(limited) if limited else 'none'}",
        ]
        return "\n".join(lines)

    # AI

    async def ai(self, ctx: DispatchContext, args: list[str]) -> str:
        provider = parse_chat_provider(args[0]) if len(args) > 1 else None
        if provider is not None:
            message = " ".join(args[1:])
        else:
            provider = self.current_provider(ctx)
            message = " ".join(args)
        return await self._chat(message, provider)

    async def _chat(self, message: str, provider: ChatProvider) -> str:
        result = await self._services.router.chat(message, provider=provider)
        if not result.success:
            return _failure(f"AI request ({provider.value})", result.response.error)
        return result.text

    async def model(self, ctx: DispatchContext, args: list[str]) -> str:
        provider = parse_chat_provider(args[0])
        if provider is None:
            available = ", ".join(p.value for p in ChatProvider)
            return f"Unknown model: {args[0]}\nAvailable models: {available}"

        await ctx.preferences.set_preferred_provider(ctx.session.user_id, provider.value)
        logger.info(f"{ctx.session.user_id} switched AI model to {provider.value}")
        return f"AI model set to {provider.value}."

    async def models(self, ctx: DispatchContext, args: list[str]) -> str:
        current = self.current_provider(ctx)
        lines = ["Available AI models:", ""]
        for provider in ChatProvider:
            marker = " (current)" if provider == current else ""
            lines.append(f"- {provider.value}{marker}: {CHAT_DESCRIPTIONS[provider]}")
        lines += ["", f"Use {self._prefix}model <name> to switch."]
        return "\n".join(lines)

    async def chat_intent(self, ctx: DispatchContext, args: list[str]) -> str:
        message = " ".join(args).strip()
        if not message:
            return f"Send me a message, or type {self._prefix}help."
        return await self._chat(message, self.current_provider(ctx))

    # Translation

    async def translate(self, ctx: DispatchContext, args: list[str]) -> str:
        return await self._translate(args[0], " ".join(args[1:]))

    async def translation_intent(self, ctx: DispatchContext, args: list[str]) -> str:
        return await self._translate(args[0], " ".join(args[1:]))

    async def _translate(self, language: str, text: str) -> str:
        result = await self._services.translation.translate(text, language)
        if not result.success:
            reply = _failure("Translation", result.error)
            if result.error.kind == ErrorKind.VALIDATION:
                reply += f"\nType {self._prefix}languages to see supported languages."
            return reply
        return (
            f"Translation ({language_name(result.target_language)}):\n"
            f"{result.translated_text}\n\n"
            f"Original: {result.original_text}\n"
            f"Provider: {result.provider}"
        )

    async def languages(self, ctx: DispatchContext, args: list[str]) -> str:
        lines = ["Supported languages:"]
        lines += [f"{code} - {name}" for code, name in SUPPORTED_LANGUAGES.items()]
        return "\n".join(lines)

    async def language(self, ctx: DispatchContext, args: list[str]) -> str:
        code = resolve_language(args[0])
        if code is None:
            return (
                f"Unsupported language: {args[0]}\n"
                f"Type {self._prefix}languages to see supported languages."
            )
        await ctx.preferences.set_language(ctx.session.user_id, code)
        return f"Default language set to {language_name(code)} ({code})."

    # Search

    async def search(self, ctx: DispatchContext, args: list[str]) -> str:
        result = await self._services.search.search(" ".join(args))
        if not result.success:
            return _failure("Search", result.error)
        return _format_hits(result, "Search results")

    async def news(self, ctx: DispatchContext, args: list[str]) -> str:
        result = await self._services.search.news(" ".join(args))
        if not result.success:
            return _failure("News search", result.error)
        return _format_hits(result, "News")

    async def research(self, ctx: DispatchContext, args: list[str]) -> str:
        result = await self._services.research.research(
            " ".join(args), provider=ctx.session.preferred_provider
        )
        if not result.success:
            return _failure("Research", result.error)
        if not result.sources:
            return f'No sources found for "{result.topic}".'

        lines = [f"Research: {result.topic}", ""]
        if result.summary:
            lines += [result.summary, ""]
        lines.append("Sources:")
        for hit in result.sources:
            lines.append(f"{hit.rank}. {hit.title}")
            if hit.url != "#":
                lines.append(f"   {hit.url}")
        return "\n".join(lines)

    # Weather

    async def weather(self, ctx: DispatchContext, args: list[str]) -> str:
        report = await self._services.weather.weather_by_city(" ".join(args))
        if not report.success:
            return _failure("Weather lookup", report.error)
        lines = [
            f"Weather in {report.city}, {report.country}:",
            f"Temperature: {report.temperature}",
            f"Condition: {report.condition}",
            f"Humidity: {report.humidity}",
            f"Wind: {report.wind_speed}",
        ]
        if report.pressure != "N/A":
            lines.append(f"Pressure: {report.pressure}")
        if report.visibility != "N/A":
            lines.append(f"Visibility: {report.visibility}")
        if report.forecast:
            lines += ["", "Forecast:"]
            for index, day in enumerate(report.forecast[:FORECAST_DAYS_SHOWN], start=1):
                if not isinstance(day, dict):
                    continue
                condition = day.get("condition") or "N/A"
                temperature = day.get("temperature") or "N/A"
                lines.append(f"Day {index}: {condition} - {temperature}")
        return "\n".join(lines)

    # Media

    async def youtube(self, ctx: DispatchContext, args: list[str]) -> HandlerResult | str:
        mode = args[1].lower() if len(args) > 1 else "summarize"
        if mode not in ("summarize", "transcribe"):
            return TextReply(self._dispatcher.get("youtube").usage)
        return await self._video(args[0], mode)

    async def youtube_intent(self, ctx: DispatchContext, args: list[str]) -> str:
        return await self._video(args[0], "summarize")

    async def _video(self, url: str, mode: str) -> str:
        media = self._services.media
        if mode == "transcribe":
            result = await media.transcribe(url)
        else:
            result = await media.summarize(url)

        if not result.success:
            return _failure(f"YouTube {mode}", result.error)

        text = result.text
        if len(text) > MAX_TRANSCRIPT_CHARS:
            text = text[:MAX_TRANSCRIPT_CHARS] + "..."

        heading = "Transcript" if mode == "transcribe" else "Summary"
        lines = [f"YouTube {heading} ({result.video_id}):", "", text]
        if result.key_points:
            lines += ["", "Key points:"] + [f"- {p}" for p in result.key_points]
        return "\n".join(lines)

    # Speech

    async def tts(self, ctx: DispatchContext, args: list[str]) -> HandlerResult:
        tts = self._services.tts
        voice = tts.match_voice(args[-1]) if len(args) > 1 else None
        if voice is not None:
            text = " ".join(args[:-1])
        else:
            voice = ctx.session.tts_voice
            text = " ".join(args)

        result = await tts.synthesize(text, voice)
        if not result.success:
            return TextReply(_failure("Text-to-speech", result.error))
        return MediaReply(
            url=result.audio_url, caption=f"Voice: {result.voice}", media_type="audio"
        )

    async def voice(self, ctx: DispatchContext, args: list[str]) -> str:
        voice = self._services.tts.match_voice(args[0])
        if voice is None:
            return f"Unknown voice: {args[0]}\nType {self._prefix}voices to list voices."
        await ctx.preferences.set_tts_voice(ctx.session.user_id, voice)
        return f"Voice set to {voice}."

    async def voices(self, ctx: DispatchContext, args: list[str]) -> str:
        lines = ["Available voices:"]
        for language, names in self._services.tts.voices_by_language().items():
            if names:
                lines.append(f"{language}: {', '.join(names)}")
        return "\n".join(lines)

    # Phone

    async def phone(self, ctx: DispatchContext, args: list[str]) -> str:
        return await self._phone("".join(args))

    async def phone_intent(self, ctx: DispatchContext, args: list[str]) -> str:
        return await self._phone(args[0])

    async def _phone(self, number: str) -> str:
        result = await self._services.phone.lookup(number)
        if not result.success:
            return _failure("Phone lookup", result.error)

        lines = [
            "Phone number lookup:",
            f"Number: {result.number}",
            f"Name: {result.name}",
            f"Carrier: {result.carrier}",
            f"Location: {result.location}",
            f"Country: {result.country_code}",
            f"Type: {result.line_type}",
        ]
        if result.spam_score > 0:
            lines.append(f"Spam score: {result.spam_score}/100")
        if result.tags:
            lines.append(f"Tags: {', '.join(result.tags)}")
        return "\n".join(lines)

    async def phoneinfo(self, ctx: DispatchContext, args: list[str]) -> str:
        result = await self._services.phone.info(" ".join(args))
        if not result.success:
            return _failure("Phone info lookup", result.error)

        lines = [
            f"Phone specifications for {result.query}:",
            f"Name: {result.name}",
            f"Brand: {result.brand}",
        ]
        for label, value in result.specifications.items():
            lines.append(f"{label}: {value}")
        if result.price != "Unknown":
            lines.append(f"Price: {result.price}")
        return "\n".join(lines)

    # Images

    async def generate_image(self, ctx: DispatchContext, args: list[str]) -> HandlerResult:
        prompt = " ".join(args)
        result = await self._services.images.generate(prompt)
        if not result.success:
            return TextReply(_failure("Image generation", result.error))
        return MediaReply(url=result.url, caption=f"Generated image: {prompt}", media_type="image")
