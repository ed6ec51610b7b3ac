"""
Insight Service - Summaries and Translation

This module wraps the generative text service for two tasks:

- Summarizer: a 1-2 sentence insight about a text's sentiment
- Translator: translation into English before classification

Both run through a FallbackChain with a deterministic local strategy, so a
missing API key, a network error or an unusable answer never surfaces to
the caller:

- summary fallback: templated sentence built from label, confidence,
  language and a length qualifier
- translation fallback: the original text, unchanged
"""

import logging
from typing import Optional

from sentiment_service.models.schemas import LanguageDetectionResult, SentimentLabel
from sentiment_service.services.fallback import FallbackChain, RecoverableError, Strategy
from sentiment_service.services.gemini_client import GeminiClient, GeminiClientError

logger = logging.getLogger(__name__)


SUMMARY_INPUT_LIMIT = 500
TRANSLATION_INPUT_LIMIT = 1000
MIN_SUMMARY_LENGTH = 10
TRANSLATION_MIN_CONFIDENCE = 0.3

SENTIMENT_DESCRIPTIONS = {
    SentimentLabel.POSITIVE: "an optimistic and favorable view",
    SentimentLabel.NEGATIVE: "concerns or dissatisfaction",
    SentimentLabel.NEUTRAL: "a balanced or objective perspective",
}


def _clip(text: str, limit: int) -> str:
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def length_qualifier(text: str) -> str:
    """'brief' under 100 chars, 'moderate' under 500, 'substantial' otherwise"""
    length = len(text or "")
    if length < 100:
        return "brief"
    if length < 500:
        return "moderate"
    return "substantial"


def fallback_summary(
    text: str,
    language_name: str,
    label: SentimentLabel,
    confidence: float
) -> str:
    """Deterministic summary used whenever the generative service can't help"""
    label = SentimentLabel(label)
    description = SENTIMENT_DESCRIPTIONS.get(label, "mixed emotions")
    return (
        f"This {language_name} text expresses {label.value.lower()} sentiment with "
        f"{round(confidence * 100)}% confidence, indicating {description} "
        f"across {length_qualifier(text)} content."
    )


def should_translate(detection: LanguageDetectionResult, auto_translate: bool = True) -> bool:
    """
    Translation runs only when requested, the text isn't English already and
    detection is confident enough (> 0.3)
    """
    return (
        auto_translate
        and detection.iso_code.lower() != "en"
        and detection.confidence > TRANSLATION_MIN_CONFIDENCE
    )


class Summarizer:
    """
    Generates a short sentiment insight

    Example:
        >>> summarizer = Summarizer(GeminiClient())
        >>> summarizer.generate_summary("Great food", "English", SentimentLabel.POSITIVE, 0.9)
        'This English text expresses positive sentiment with 90% confidence, ...'
    """

    def __init__(self, client: Optional[GeminiClient] = None):
        self.client = client or GeminiClient()

        strategies = []
        if self.client.enabled:
            strategies.append(Strategy("gemini", self._summarize_remote))
        strategies.append(Strategy("template", self._summarize_template))

        self.chain = FallbackChain(
            "summary",
            strategies,
            recoverable=(RecoverableError, GeminiClientError)
        )

    @staticmethod
    def build_prompt(text: str, language_name: str, label: SentimentLabel, confidence: float) -> str:
        label = SentimentLabel(label)
        return (
            "Analyze this text and provide a brief, insightful summary about its "
            "sentiment and emotional context:\n\n"
            f"Text: \"{_clip(text, SUMMARY_INPUT_LIMIT)}\"\n"
            f"Detected Language: {language_name}\n"
            f"Primary Sentiment: {label.value} ({round(confidence * 100)}% confidence)\n\n"
            "Please provide a concise 1-2 sentence insight about:\n"
            "1. The emotional tone and context\n"
            "2. What this sentiment suggests about the user's experience or opinion\n\n"
            "Keep it professional and analytical."
        )

    def _summarize_remote(self, request: dict) -> str:
        summary = self.client.generate(self.build_prompt(**request))
        if len(summary.strip()) <= MIN_SUMMARY_LENGTH:
            raise RecoverableError(f"Summary too short ({len(summary.strip())} chars)")
        return summary.strip()

    @staticmethod
    def _summarize_template(request: dict) -> str:
        return fallback_summary(**request)

    def generate_summary(
        self,
        text: str,
        language_name: str,
        label: SentimentLabel,
        confidence: float
    ) -> str:
        """
        Write an insight about the text's sentiment

        Args:
            text: Original-language text (never the translation)
            language_name: Detected language name
            label: Primary sentiment label
            confidence: Primary sentiment confidence (0..1)

        Returns:
            Non-empty summary sentence(s)
        """
        outcome = self.chain.run({
            "text": text,
            "language_name": language_name,
            "label": label,
            "confidence": confidence,
        })
        logger.debug(f"Summary produced by '{outcome.strategy}'")
        return outcome.value


class Translator:
    """
    Translates text through the generative service

    Returns the input unchanged when the service is unavailable, answers
    with nothing, or echoes the input back.
    """

    def __init__(self, client: Optional[GeminiClient] = None):
        self.client = client or GeminiClient()

        strategies = []
        if self.client.enabled:
            strategies.append(Strategy("gemini", self._translate_remote))
        strategies.append(Strategy("passthrough", lambda request: request["text"]))

        self.chain = FallbackChain(
            "translation",
            strategies,
            recoverable=(RecoverableError, GeminiClientError)
        )

    @staticmethod
    def build_prompt(text: str, source_language: str, target_language: str) -> str:
        return (
            f"Translate the following text from {source_language} to {target_language}.\n"
            "Provide only the translation, no explanations:\n\n"
            f"\"{_clip(text, TRANSLATION_INPUT_LIMIT)}\""
        )

    def _translate_remote(self, request: dict) -> str:
        translated = self.client.generate(self.build_prompt(**request)).strip()
        if not translated or translated == request["text"]:
            raise RecoverableError("Translation returned empty or unchanged text")
        return translated

    def translate(self, text: str, source_language: str, target_language: str = "English") -> str:
        """
        Translate text

        Args:
            text: Text to translate
            source_language: Language name or code of the input
            target_language: Language name or code to translate into

        Returns:
            Translated text, or the original text on any failure
        """
        if not text or source_language.strip().lower() == target_language.strip().lower():
            return text

        logger.info(f"Translating {len(text)} chars from {source_language} to {target_language}")
        outcome = self.chain.run({
            "text": text,
            "source_language": source_language,
            "target_language": target_language,
        })
        return outcome.value
