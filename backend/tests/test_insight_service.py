"""
Unit Tests for Summaries and Translation

Tests cover:
- Templated summary fallback
- Gemini summary / translation with mocked HTTP
- Short, empty and echoed answers falling back
- Translation skip rule
"""

import pytest
from unittest.mock import MagicMock, patch

import requests

from sentiment_service.exceptions import SummarizationFailure
from sentiment_service.models.schemas import LanguageDetectionResult, SentimentLabel
from sentiment_service.services.gemini_client import (
    GeminiClient,
    GeminiConfig,
    GeminiConnectionError,
    GeminiModelError,
)
from sentiment_service.services.insight_service import (
    Summarizer,
    Translator,
    fallback_summary,
    length_qualifier,
    should_translate,
)


def gemini_response(text, status_code=200):
    response = MagicMock(status_code=status_code, text=str(text))
    response.json.return_value = {"candidates": [{"content": {"parts": [{"text": text}]}}]}
    return response


@pytest.fixture
def gemini():
    return GeminiClient(GeminiConfig(api_key="test-key", max_retries=0))


class TestFallbackSummary:

    def test_template(self):
        summary = fallback_summary("Great food", "English", SentimentLabel.POSITIVE, 0.856)

        assert summary == (
            "This English text expresses positive sentiment with 86% confidence, "
            "indicating an optimistic and favorable view across brief content."
        )

    @pytest.mark.parametrize("length,qualifier", [(10, "brief"), (250, "moderate"), (900, "substantial")])
    def test_length_qualifier(self, length, qualifier):
        assert length_qualifier("x" * length) == qualifier

    def test_offline_summarizer_uses_template(self, offline_gemini):
        summary = Summarizer(offline_gemini).generate_summary(
            "Terrible service", "English", SentimentLabel.NEGATIVE, 0.7
        )

        assert "negative sentiment with 70% confidence" in summary
        assert "concerns or dissatisfaction" in summary


class TestSummarizer:

    def test_uses_gemini_answer(self, gemini):
        answer = "The reviewer is clearly delighted with the meal and service."

        with patch("sentiment_service.services.gemini_client.requests.post",
                   return_value=gemini_response(answer)) as mock_post:
            summary = Summarizer(gemini).generate_summary(
                "Great food", "English", SentimentLabel.POSITIVE, 0.9
            )

        assert summary == answer
        _, kwargs = mock_post.call_args
        assert kwargs["params"] == {"key": "test-key"}
        assert "Great food" in kwargs["json"]["contents"][0]["parts"][0]["text"]

    def test_prompt_truncates_long_text(self):
        prompt = Summarizer.build_prompt("a" * 600, "English", SentimentLabel.NEUTRAL, 0.5)

        assert "a" * 500 + "..." in prompt
        assert "a" * 501 not in prompt

    def test_short_answer_falls_back(self, gemini):
        with patch("sentiment_service.services.gemini_client.requests.post",
                   return_value=gemini_response("Good.")):
            summary = Summarizer(gemini).generate_summary(
                "Great food", "English", SentimentLabel.POSITIVE, 0.9
            )

        assert summary.startswith("This English text expresses positive sentiment")

    def test_connection_error_falls_back(self, gemini):
        with patch("sentiment_service.services.gemini_client.requests.post",
                   side_effect=requests.exceptions.ConnectionError("down")):
            summary = Summarizer(gemini).generate_summary(
                "Great food", "English", SentimentLabel.POSITIVE, 0.9
            )

        assert "90% confidence" in summary


class TestTranslator:

    def test_translates(self, gemini):
        with patch("sentiment_service.services.gemini_client.requests.post",
                   return_value=gemini_response("The food is great")):
            translated = Translator(gemini).translate("La comida es genial", "Spanish")

        assert translated == "The food is great"

    @pytest.mark.parametrize("answer", ["", "La comida es genial"])
    def test_empty_or_echoed_answer_returns_original(self, gemini, answer):
        with patch("sentiment_service.services.gemini_client.requests.post",
                   return_value=gemini_response(answer)):
            translated = Translator(gemini).translate("La comida es genial", "Spanish")

        assert translated == "La comida es genial"

    def test_error_status_returns_original(self, gemini):
        with patch("sentiment_service.services.gemini_client.requests.post",
                   return_value=gemini_response("", status_code=400)):
            translated = Translator(gemini).translate("La comida es genial", "Spanish")

        assert translated == "La comida es genial"

    def test_same_language_skips_call(self, gemini):
        with patch("sentiment_service.services.gemini_client.requests.post") as mock_post:
            translated = Translator(gemini).translate("hello there", "English", "english")

        assert translated == "hello there"
        mock_post.assert_not_called()

    def test_offline_passthrough(self, offline_gemini):
        assert Translator(offline_gemini).translate("hola amigos", "Spanish") == "hola amigos"


class TestShouldTranslate:

    @pytest.mark.parametrize("iso_code,confidence,auto,expected", [
        ("es", 0.8, True, True),
        ("es", 0.3, True, False),
        ("en", 0.9, True, False),
        ("es", 0.8, False, False),
    ])
    def test_rule(self, iso_code, confidence, auto, expected):
        detection = LanguageDetectionResult(
            language_name="Spanish", confidence=confidence, iso_code=iso_code
        )

        assert should_translate(detection, auto) is expected


class TestGeminiClient:

    def test_retries_then_raises_connection_error(self):
        client = GeminiClient(GeminiConfig(api_key="k", max_retries=2))

        with patch("sentiment_service.services.gemini_client.requests.post",
                   side_effect=requests.exceptions.ConnectionError("down")) as mock_post, \
                patch("sentiment_service.services.gemini_client.time.sleep") as mock_sleep:
            with pytest.raises(GeminiConnectionError):
                client.generate("hello")

        assert mock_post.call_count == 3
        assert mock_sleep.call_count == 2

    def test_missing_candidates_is_model_error(self, gemini):
        response = MagicMock(status_code=200)
        response.json.return_value = {"candidates": []}

        with patch("sentiment_service.services.gemini_client.requests.post",
                   return_value=response):
            with pytest.raises(GeminiModelError):
                gemini.generate("hello")

    def test_client_errors_are_summarization_failures(self, gemini):
        with patch("sentiment_service.services.gemini_client.requests.post",
                   return_value=gemini_response("", status_code=500)):
            with pytest.raises(SummarizationFailure) as exc_info:
                gemini.generate("hello")

        assert exc_info.value.status_code == 502

    def test_disabled_without_key(self, offline_gemini):
        assert offline_gemini.health_check()["available"] is False
        with pytest.raises(GeminiModelError):
            offline_gemini.generate("hello")
