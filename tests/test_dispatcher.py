"""
Dispatcher Tests

Tests for command parsing, dispatch, handlers and the message processor,
with upstreams stubbed through httpx.MockTransport.

Test Categories:
1. TestCommandParsing - parse_command() unit tests
2. TestCommandDispatcher - Registration, aliases, usage and unknown commands
3. TestDispatchSafety - Handler faults become the generic apology
4. TestPreferenceCommands - /model, /voice, /language through the store
5. TestServiceCommands - Commands backed by gateway calls
6. TestImplicitIntents - Non-command messages end to end
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from relaybot.dispatcher import (
    APOLOGY,
    Command,
    CommandDispatcher,
    DispatchContext,
    InMemoryPreferenceStore,
    MediaReply,
    SessionContext,
    TextReply,
    parse_command,
)

from fixtures import (
    CITY_PAYLOAD,
    PHONE_PAYLOAD,
    PHONE_SPECS_PAYLOAD,
    SEARCH_PAYLOAD,
    WEATHER_PAYLOAD,
    by_url,
)


def make_context(user_id: str = "u1", **session) -> DispatchContext:
    store = InMemoryPreferenceStore()
    return DispatchContext(
        raw_text="", session=SessionContext(user_id=user_id, **session), preferences=store
    )


class TestCommandParsing:
    """Unit tests for parse_command()."""

    def test_command_and_args(self):
        parsed = parse_command("/translate es Hello world")

        assert parsed.name == "translate"
        assert parsed.args == ["es", "Hello", "world"]
        assert parsed.remainder == "es Hello world"

    def test_token_is_lowercased(self):
        assert parse_command("/TRANSLATE es hi").name == "translate"

    def test_extra_whitespace_collapsed(self):
        parsed = parse_command("  /search   python    asyncio  ")

        assert parsed.name == "search"
        assert parsed.args == ["python", "asyncio"]

    def test_no_args(self):
        parsed = parse_command("/help")

        assert parsed.name == "help"
        assert parsed.args == []

    def test_not_a_command(self):
        assert parse_command("hello /help") is None

    def test_custom_prefix(self):
        assert parse_command("!ping now", prefix="!").args == ["now"]


class TestCommandDispatcher:
    """Tests for CommandDispatcher.dispatch()."""

    @pytest.fixture
    def dispatcher(self):
        dispatcher = CommandDispatcher(prefix="/")

        async def echo(ctx, args):
            return " ".join(args)

        dispatcher.register(
            Command("echo", echo, "Usage: /echo <text>", "Echo text", min_args=1, aliases=("say",))
        )
        return dispatcher

    @pytest.mark.asyncio
    async def test_bare_string_is_wrapped(self, dispatcher):
        reply = await dispatcher.dispatch("/echo hi there", make_context())

        assert reply == TextReply("hi there")

    @pytest.mark.asyncio
    async def test_alias(self, dispatcher):
        reply = await dispatcher.dispatch("/SAY hi", make_context())

        assert reply.value == "hi"

    @pytest.mark.asyncio
    async def test_missing_args_returns_usage(self, dispatcher):
        reply = await dispatcher.dispatch("/echo", make_context())

        assert reply.value == "Usage: /echo <text>"

    @pytest.mark.asyncio
    async def test_unknown_command(self, dispatcher):
        reply = await dispatcher.dispatch("/frobnicate now", make_context())

        assert "Unknown command" in reply.value
        assert "/frobnicate" in reply.value
        assert "/help" in reply.value

    @pytest.mark.asyncio
    async def test_prefix_alone_is_unknown(self, dispatcher):
        reply = await dispatcher.dispatch("/", make_context())

        assert "Unknown command" in reply.value

    def test_commands_exclude_aliases(self, dispatcher):
        assert [c.name for c in dispatcher.commands] == ["echo"]


class TestDispatchSafety:
    """Handler faults never escape the dispatcher."""

    @pytest.mark.asyncio
    async def test_handler_exception_becomes_apology(self):
        dispatcher = CommandDispatcher()

        async def broken(ctx, args):
            raise RuntimeError("secret internal detail")

        dispatcher.register(Command("boom", broken, "Usage: /boom", "Explodes"))

        reply = await dispatcher.dispatch("/boom", make_context())

        assert reply == TextReply(APOLOGY)
        assert "secret" not in reply.value

    @pytest.mark.asyncio
    async def test_next_message_still_processed(self, make_processor):
        processor, _ = make_processor()

        async def broken(ctx, args):
            raise ValueError("bad")

        processor.dispatcher.register(Command("boom", broken, "Usage: /boom", "Explodes"))

        first = await processor.process("u1", "/boom")
        second = await processor.process("u1", "/help")

        assert first.value == APOLOGY
        assert "Available commands" in second.value

    @pytest.mark.asyncio
    async def test_implicit_intent_fault_becomes_apology(self, make_processor):
        processor, _ = make_processor()

        with patch.object(
            processor.handlers, "chat_intent", AsyncMock(side_effect=RuntimeError("x"))
        ):
            reply = await processor.process("u1", "Hello there")

        assert reply.value == APOLOGY

    @pytest.mark.asyncio
    async def test_blank_message_gets_hint(self, make_processor):
        processor, upstream = make_processor()

        reply = await processor.process("u1", "   ")

        assert "/help" in reply.value
        assert upstream.calls == 0


class TestPreferenceCommands:
    """Commands that change session preferences through the store."""

    @pytest.mark.asyncio
    async def test_model_switch_updates_store(self, make_processor):
        """/model gemini on a session preferring openai."""
        store = InMemoryPreferenceStore()
        store.seed(SessionContext(user_id="u1", preferred_provider="openai"))
        processor, upstream = make_processor(store=store)

        reply = await processor.process("u1", "/model gemini")

        session = await store.get_session("u1")
        assert session.preferred_provider == "gemini"
        assert "gemini" in reply.value
        assert upstream.calls == 0

    @pytest.mark.asyncio
    async def test_model_alias_is_canonicalized(self, make_processor, preference_store):
        processor, _ = make_processor(store=preference_store)

        await processor.process("u1", "/model claudeai")

        assert (await preference_store.get_session("u1")).preferred_provider == "claude"

    @pytest.mark.asyncio
    async def test_unknown_model_leaves_preference(self, make_processor, preference_store):
        processor, _ = make_processor(store=preference_store)

        reply = await processor.process("u1", "/model gpt5")

        assert "Unknown model" in reply.value
        assert (await preference_store.get_session("u1")).preferred_provider is None

    @pytest.mark.asyncio
    async def test_voice_and_language(self, make_processor, preference_store):
        processor, _ = make_processor(store=preference_store)

        voice_reply = await processor.process("u1", "/voice matthew")
        language_reply = await processor.process("u1", "/language French")

        session = await preference_store.get_session("u1")
        assert session.tts_voice == "Matthew"
        assert session.language == "fr"
        assert "Matthew" in voice_reply.value
        assert "French" in language_reply.value

    @pytest.mark.asyncio
    async def test_settings_shows_preferences(self, make_processor, preference_store):
        preference_store.seed(
            SessionContext(user_id="u1", preferred_provider="kimi", tts_voice="Brian")
        )
        processor, _ = make_processor(store=preference_store)

        reply = await processor.process("u1", "/settings")

        assert "AI model: kimi" in reply.value
        assert "TTS voice: Brian" in reply.value


class TestServiceCommands:
    """Commands backed by upstream calls."""

    @pytest.mark.asyncio
    async def test_translate_command(self, make_processor):
        processor, _ = make_processor(
            by_url(
                {
                    "sheikhhridoy": httpx.Response(500),
                    "hs-translate-text": httpx.Response(200, json={"translatedText": "Hola mundo"}),
                }
            )
        )

        reply = await processor.process("u1", "/translate es Hello world")

        assert "Hola mundo" in reply.value
        assert "Spanish" in reply.value
        assert "dara_translator" in reply.value

    @pytest.mark.asyncio
    async def test_translate_unsupported_language(self, make_processor):
        processor, upstream = make_processor()

        reply = await processor.process("u1", "/translate xx Hello")

        assert "Unsupported language" in reply.value
        assert "/languages" in reply.value
        assert upstream.calls == 0

    @pytest.mark.asyncio
    async def test_translate_all_providers_down(self, make_processor):
        processor, _ = make_processor(lambda r: httpx.Response(503))

        reply = await processor.process("u1", "/translate es Hello")

        assert reply.value == "Translation failed: all providers are currently unavailable"

    @pytest.mark.asyncio
    async def test_tts_usage(self, make_processor):
        processor, _ = make_processor()

        reply = await processor.process("u1", "/tts")

        assert reply.value.startswith("Usage: /tts")

    @pytest.mark.asyncio
    async def test_tts_media_reply(self, make_processor):
        processor, _ = make_processor(
            lambda r: httpx.Response(200, content=b"ID3", headers={"content-type": "audio/mpeg"})
        )

        reply = await processor.process("u1", "/tts Hello there Matthew")

        assert isinstance(reply, MediaReply)
        assert reply.media_type == "audio"
        assert reply.caption == "Voice: Matthew"
        assert "voice=Matthew" in reply.url
        assert "text=Hello+there" in reply.url or "text=Hello%20there" in reply.url

    @pytest.mark.asyncio
    async def test_image_alias(self, make_processor):
        processor, upstream = make_processor()

        reply = await processor.process("u1", "/image a red fox")

        assert isinstance(reply, MediaReply)
        assert reply.url == "https://image.pollinations.ai/prompt/a%20red%20fox"
        assert upstream.calls == 0

    @pytest.mark.asyncio
    async def test_truecaller_alias(self, make_processor):
        processor, upstream = make_processor(
            by_url({"truecaller": httpx.Response(200, json=PHONE_PAYLOAD)})
        )

        reply = await processor.process("u1", "/truecaller +1 415 555 2671")

        assert "Jane Doe" in reply.value
        assert upstream.requests[0].url.params["q"] == "+14155552671"

    @pytest.mark.asyncio
    async def test_phoneinfo_command(self, make_processor):
        processor, upstream = make_processor(
            by_url({"phone-info": httpx.Response(200, json=PHONE_SPECS_PAYLOAD)})
        )

        reply = await processor.process("u1", "/phoneinfo Galaxy S24")

        assert "Phone specifications for Galaxy S24" in reply.value
        assert "Brand: Samsung" in reply.value
        assert "Processor: Snapdragon 8 Gen 3" in reply.value
        assert "Price: $799" in reply.value
        assert upstream.calls_to("api.yabes-desu.workers.dev/tools/phone-info") == 1

    @pytest.mark.asyncio
    async def test_phoneinfo_usage(self, make_processor):
        processor, upstream = make_processor()

        reply = await processor.process("u1", "/phoneinfo")

        assert reply.value.startswith("Usage: /phoneinfo <model>")
        assert upstream.calls == 0

    @pytest.mark.asyncio
    async def test_weather_command(self, make_processor):
        processor, upstream = make_processor(
            by_url(
                {
                    "search-city": httpx.Response(200, json=CITY_PAYLOAD),
                    "all-weather": httpx.Response(200, json=WEATHER_PAYLOAD),
                }
            )
        )

        reply = await processor.process("u1", "/weather London")

        assert "Weather in London, GB" in reply.value
        assert "18°C" in reply.value
        assert upstream.requests[1].url.params["lat"] == "51.5072"
        assert "Pressure" not in reply.value

    @pytest.mark.asyncio
    async def test_weather_details_and_forecast(self, make_processor):
        detailed = {
            "result": {
                **WEATHER_PAYLOAD["result"],
                "pressure": "1012 hPa",
                "visibility": "10 km",
                "forecast": [
                    {"condition": "Rain", "temperature": "15°C"},
                    {"condition": "Sunny"},
                    {"condition": "Windy", "temperature": "12°C"},
                    {"condition": "Snow", "temperature": "0°C"},
                ],
            }
        }
        processor, _ = make_processor(
            by_url(
                {
                    "search-city": httpx.Response(200, json=CITY_PAYLOAD),
                    "all-weather": httpx.Response(200, json=detailed),
                }
            )
        )

        reply = await processor.process("u1", "/weather London")

        assert "Pressure: 1012 hPa" in reply.value
        assert "Visibility: 10 km" in reply.value
        assert "Day 1: Rain - 15°C" in reply.value
        assert "Day 2: Sunny - N/A" in reply.value
        assert "Day 3: Windy - 12°C" in reply.value
        assert "Snow" not in reply.value

    @pytest.mark.asyncio
    async def test_search_command(self, make_processor):
        processor, _ = make_processor(
            by_url({"googlesearchapi": httpx.Response(200, json=SEARCH_PAYLOAD)})
        )

        reply = await processor.process("u1", "/search python")

        assert 'Search results for "python"' in reply.value
        assert "Asyncio tutorial" in reply.value
        assert "docs.python.org/3/library/asyncio.html" in reply.value
        assert "https://docs.python.org" not in reply.value

    @pytest.mark.asyncio
    async def test_rate_limited_reply_names_the_kind(self, make_processor):
        processor, _ = make_processor(
            by_url({"googlesearchapi": httpx.Response(200, json=SEARCH_PAYLOAD)})
        )
        limiter = processor.handlers._services.executor.rate_limiter
        for _ in range(100):
            limiter.record_and_check("google_search", 100, 60)

        reply = await processor.process("u1", "/search python")

        assert "rate limit" in reply.value

    @pytest.mark.asyncio
    async def test_help_lists_commands(self, make_processor):
        processor, _ = make_processor()

        reply = await processor.process("u1", "/help")

        for name in ("translate", "weather", "generate_image", "model", "status"):
            assert f"/{name}" in reply.value

    @pytest.mark.asyncio
    async def test_status_lists_services(self, make_processor):
        processor, _ = make_processor()

        reply = await processor.process("u1", "/status")

        assert "Google Gemini: ok" in reply.value
        assert "Cached responses: 0" in reply.value


class TestImplicitIntents:
    """Non-command messages routed through the classifier."""

    @pytest.mark.asyncio
    async def test_chat_uses_preferred_provider(self, make_processor, preference_store):
        preference_store.seed(SessionContext(user_id="u1", preferred_provider="claude"))
        processor, upstream = make_processor(
            by_url({"claudeai": httpx.Response(200, json={"response": "Hi, I'm Claude"})}),
            store=preference_store,
        )

        reply = await processor.process("u1", "Hello there")

        assert reply.value == "Hi, I'm Claude"
        assert upstream.calls_to("claudeai") == 1

    @pytest.mark.asyncio
    async def test_translation_phrase(self, make_processor):
        processor, _ = make_processor(
            by_url({"sheikhhridoy": httpx.Response(200, json={"translated_text": "Hola"})})
        )

        reply = await processor.process("u1", "translate hello to spanish")

        assert "Hola" in reply.value
        assert "ai_translator" in reply.value

    @pytest.mark.asyncio
    async def test_youtube_link_summarized(self, make_processor):
        processor, upstream = make_processor(
            by_url(
                {
                    "yt-summarizer": httpx.Response(
                        200, json={"summary": "A song.", "keyPoints": ["never", "gonna"]}
                    )
                }
            )
        )

        reply = await processor.process("u1", "https://youtu.be/dQw4w9WgXcQ")

        assert "A song." in reply.value
        assert "- never" in reply.value
        assert upstream.calls_to("yt-summarizer") == 1

    @pytest.mark.asyncio
    async def test_phone_number_looked_up(self, make_processor):
        processor, _ = make_processor(
            by_url({"truecaller": httpx.Response(200, json=PHONE_PAYLOAD)})
        )

        reply = await processor.process("u1", "+14155552671")

        assert "Carrier: Example Mobile" in reply.value
        assert "Spam score: 12/100" in reply.value
