"""
Language Detection Service

This module detects the dominant language of text content using weighted
pattern matching. No model download is needed, which keeps detection cheap
enough to run on every request.

Responsibilities:
- Count common-word hits for Latin-script languages
- Count script-range hits for Cyrillic, CJK, Hangul, Arabic and Devanagari
- Pick the highest-scoring language and compute a confidence score
"""

from typing import Dict, List, Pattern, Tuple
import logging
import re

from sentiment_service.models.schemas import LanguageDetectionResult

logger = logging.getLogger(__name__)


def _words(*words: str) -> Pattern:
    return re.compile(r'\b(' + '|'.join(words) + r')\b', re.IGNORECASE)


# Enumeration order is also the tie-break order (first listed wins)
LANGUAGE_PATTERNS: Dict[str, Tuple[str, List[Pattern]]] = {
    'en': ("English", [_words(
        'the', 'and', 'is', 'in', 'to', 'of', 'a', 'that', 'it', 'with',
        'for', 'as', 'was', 'on', 'are', 'you')]),
    'es': ("Spanish", [_words(
        'el', 'la', 'de', 'que', 'y', 'en', 'un', 'es', 'se', 'no', 'te',
        'lo', 'le', 'da', 'su', 'por', 'son', 'con', 'para', 'al')]),
    'fr': ("French", [_words(
        'le', 'de', 'et', 'à', 'un', 'il', 'être', 'en', 'avoir', 'que',
        'pour', 'dans', 'ce', 'son', 'une', 'sur', 'avec')]),
    'de': ("German", [_words(
        'der', 'die', 'und', 'in', 'den', 'von', 'zu', 'das', 'mit', 'sich',
        'des', 'auf', 'für', 'ist', 'im', 'dem', 'nicht')]),
    'it': ("Italian", [_words(
        'il', 'di', 'che', 'e', 'la', 'per', 'un', 'in', 'con', 'del', 'da',
        'dal', 'le', 'si', 'non', 'ci', 'lo', 'questo')]),
    'pt': ("Portuguese", [_words(
        'o', 'de', 'e', 'do', 'da', 'em', 'um', 'para', 'com', 'não', 'uma',
        'os', 'no', 'se', 'na', 'por', 'mais', 'as', 'dos')]),
    'ru': ("Russian", [re.compile(r'[а-яё]', re.IGNORECASE)]),
    'ja': ("Japanese", [re.compile(r'[぀-ヿ]')]),
    'ko': ("Korean", [re.compile(r'[가-힯]')]),
    'zh': ("Chinese", [re.compile(r'[一-鿿]')]),
    'ar': ("Arabic", [re.compile(r'[ا-ي]')]),
    'hi': ("Hindi", [re.compile(r'[अ-ह]')]),
}


class LanguageDetector:
    """
    Detects the dominant language of a text

    Scoring:
    - each language counts pattern matches in the lowercased text
    - the highest raw count wins; ties go to the language listed first
      (callers must not rely on which of two equally scored languages wins)
    - confidence = min(matches / word_count, 1.0), floored at 0.1

    Example:
        >>> detector = LanguageDetector()
        >>> result = detector.detect_language("the quick brown fox and the lazy dog")
        >>> result.language_name, result.iso_code
        ('English', 'en')
    """

    def __init__(self, min_confidence: float = 0.1):
        self.min_confidence = min_confidence
        self.patterns = LANGUAGE_PATTERNS
        logger.info(f"LanguageDetector initialized with {len(self.patterns)} languages")

    def detect_language(self, text: str) -> LanguageDetectionResult:
        """
        Detect primary language of text with confidence score

        Args:
            text: Text content to analyze

        Returns:
            LanguageDetectionResult (language name, confidence, ISO 639-1 code)
        """
        scores = self.score_languages(text)

        best_code = 'en'
        best_score = -1
        for code, score in scores.items():
            if score > best_score:
                best_code, best_score = code, score

        word_count = len((text or '').split(' ')) or 1
        confidence = max(min(best_score / word_count, 1.0), self.min_confidence)

        name = self.patterns[best_code][0]
        logger.debug(f"Detected {name} ({best_code}) with confidence {confidence:.2f}")

        return LanguageDetectionResult(
            language_name=name,
            confidence=confidence,
            iso_code=best_code
        )

    def score_languages(self, text: str) -> Dict[str, int]:
        """
        Raw match counts per language

        Args:
            text: Text content to analyze

        Returns:
            Dictionary of ISO code to match count, in enumeration order
        """
        clean_text = (text or '').lower()
        scores: Dict[str, int] = {}
        for code, (_, patterns) in self.patterns.items():
            scores[code] = sum(len(pattern.findall(clean_text)) for pattern in patterns)
        return scores

    def language_name(self, iso_code: str) -> str:
        """Resolve an ISO code to its language name (falls back to the code)"""
        entry = self.patterns.get((iso_code or '').lower())
        return entry[0] if entry else iso_code
