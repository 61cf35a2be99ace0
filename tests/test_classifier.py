"""
Classifier Tests

Tests for implicit intent detection over the sample messages in
fixtures.py, including the precedence between overlapping matchers.
"""

import pytest

from relaybot.dispatcher import Intent, MessageClassifier
from relaybot.services import extract_video_id, is_phone_number, normalize_phone_number

from fixtures import (
    CHAT_SAMPLES,
    COMMAND_SAMPLES,
    PHONE_SAMPLES,
    TRANSLATION_SAMPLES,
    YOUTUBE_SAMPLES,
)


@pytest.fixture
def classifier():
    return MessageClassifier(command_prefix="/")


class TestIntentClassification:
    """Tests for MessageClassifier.classify()."""

    @pytest.mark.parametrize("text", COMMAND_SAMPLES)
    def test_commands(self, classifier, text):
        assert classifier.classify(text).intent == Intent.COMMAND

    @pytest.mark.parametrize("text", YOUTUBE_SAMPLES)
    def test_youtube_links(self, classifier, text):
        result = classifier.classify(text)

        assert result.intent == Intent.YOUTUBE
        assert result.url == text

    @pytest.mark.parametrize("text", PHONE_SAMPLES)
    def test_phone_numbers(self, classifier, text):
        result = classifier.classify(text)

        assert result.intent == Intent.PHONE
        assert result.phone_number.startswith("+")

    @pytest.mark.parametrize("text,phrase,language", TRANSLATION_SAMPLES)
    def test_translation_phrases(self, classifier, text, phrase, language):
        result = classifier.classify(text)

        assert result.intent == Intent.TRANSLATION
        assert result.phrase == phrase
        assert result.target_language == language

    @pytest.mark.parametrize("text", CHAT_SAMPLES)
    def test_default_chat(self, classifier, text):
        assert classifier.classify(text).intent == Intent.CHAT

    def test_youtube_beats_phone(self, classifier):
        """A youtu.be id made of 11 digits also passes the lax phone check."""
        text = "https://youtu.be/12345678901"

        assert is_phone_number(text)
        assert classifier.classify(text).intent == Intent.YOUTUBE

    def test_sentence_with_digits_is_chat(self, classifier):
        """Digits inside prose normalize to a number but are not phone-shaped."""
        text = "Remind me: meeting at 10:30 on 2024-05-06"

        assert is_phone_number(text)
        assert classifier.classify(text).intent == Intent.CHAT

    def test_command_beats_everything(self, classifier):
        assert classifier.classify("/translate hello to spanish").intent == Intent.COMMAND

    def test_custom_prefix(self):
        classifier = MessageClassifier(command_prefix="!")

        assert classifier.classify("!help").intent == Intent.COMMAND
        assert classifier.classify("/help").intent == Intent.CHAT


class TestPhoneNormalization:
    """Tests for normalize_phone_number()."""

    def test_formatting_stripped(self):
        assert normalize_phone_number("+1 (415) 555-2671") == "+14155552671"

    def test_plus_prefixed_when_long_enough(self):
        assert normalize_phone_number("4155552671") == "+4155552671"

    def test_short_numbers_rejected(self):
        assert normalize_phone_number("25") is None
        assert normalize_phone_number("555-1234") is None

    def test_invalid_leading_zero(self):
        assert normalize_phone_number("+0123456789") is None

    def test_empty(self):
        assert normalize_phone_number("") is None
        assert normalize_phone_number(None) is None


class TestVideoIds:
    def test_extract_video_id(self):
        assert extract_video_id("https://www.youtube.com/watch?v=dQw4w9WgXcQ") == "dQw4w9WgXcQ"
        assert extract_video_id("youtu.be/dQw4w9WgXcQ?t=10") == "dQw4w9WgXcQ"
        assert extract_video_id("https://vimeo.com/123") is None
