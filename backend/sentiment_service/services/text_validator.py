"""
Extracted Text Validation

Single gate every input passes before analysis, whether it was typed,
scraped from a URL or recovered from a file. Rejects empty, too short,
corrupted, repetitive or content-free text, and truncates overly long text.
"""

from dataclasses import dataclass
from typing import Optional
import logging
import re

from sentiment_service.exceptions import (
    EmptyInput,
    InsufficientContent,
    LikelyCorrupted,
    Repetitive,
    TooShort,
)

logger = logging.getLogger(__name__)


CORRUPTION_INDICATORS = [
    re.compile(r'[\x00-\x08\x0B\x0E-\x1F\x7F-\x9F\uFFFD]'),        # non-printable characters
    re.compile(r'[^\w\s.,!?;:()\[\]{}"\'`~@#$%^&*+=|\\/<>-]'),   # unusual symbols
    re.compile(r'\b\w{20,}\b'),                                   # very long words
    re.compile(r'[A-Za-z]{2,}[0-9]{3,}'),                         # mixed alphanumeric runs
]


@dataclass
class ValidationResult:
    """
    Accepted text ready for analysis

    Attributes:
        clean_text: Whitespace-normalized (possibly truncated) text
        truncated: True when the text was cut to the maximum length
        notice: Non-fatal message shown alongside a truncated result
    """
    clean_text: str
    truncated: bool = False
    notice: Optional[str] = None


class TextValidator:
    """
    Scores text for corruption, repetition and insufficiency

    Thresholds:
    - minimum length: 3 characters after whitespace normalization
    - corruption ratio: indicator matches / characters must not exceed 0.4
    - unique-word ratio: below 0.3 rejects when there are more than 20 words
    - meaningful words: at least 3 alphanumeric tokens longer than 1 char
    - maximum length: 5000 characters (longer text is truncated)
    """

    def __init__(
        self,
        min_length: int = 3,
        max_length: int = 5000,
        max_corruption_ratio: float = 0.4,
        min_unique_ratio: float = 0.3,
        repetition_min_words: int = 20,
        min_meaningful_words: int = 3
    ):
        self.min_length = min_length
        self.max_length = max_length
        self.max_corruption_ratio = max_corruption_ratio
        self.min_unique_ratio = min_unique_ratio
        self.repetition_min_words = repetition_min_words
        self.min_meaningful_words = min_meaningful_words

    def validate(self, text: Optional[str]) -> ValidationResult:
        """
        Validate and clean text

        Args:
            text: Raw extracted or directly supplied text

        Returns:
            ValidationResult with the cleaned text

        Raises:
            EmptyInput, TooShort, LikelyCorrupted, Repetitive, InsufficientContent
        """
        if not text or not text.strip():
            raise EmptyInput()

        clean_text = re.sub(r'\s+', ' ', text).strip()

        if len(clean_text) < self.min_length:
            raise TooShort()

        ratio = self.corruption_ratio(clean_text)
        if ratio > self.max_corruption_ratio:
            logger.info(f"Rejected text with corruption ratio {ratio:.2f}")
            raise LikelyCorrupted()

        words = clean_text.split(' ')
        if (self.unique_word_ratio(words) < self.min_unique_ratio
                and len(words) > self.repetition_min_words):
            raise Repetitive()

        meaningful = [w for w in words if len(w) > 1 and w.isalnum()]
        if len(meaningful) < self.min_meaningful_words:
            raise InsufficientContent()

        if len(clean_text) > self.max_length:
            logger.info(f"Truncating text from {len(clean_text)} to {self.max_length} chars")
            return ValidationResult(
                clean_text=clean_text[:self.max_length] + '...',
                truncated=True,
                notice=f"Text was truncated to {self.max_length} characters for processing"
            )

        return ValidationResult(clean_text=clean_text)

    @staticmethod
    def corruption_ratio(text: str) -> float:
        """Indicator matches divided by total text length"""
        if not text:
            return 0.0
        score = sum(len(indicator.findall(text)) for indicator in CORRUPTION_INDICATORS)
        return score / len(text)

    @staticmethod
    def unique_word_ratio(words) -> float:
        """Distinct tokens divided by token count"""
        if not words:
            return 1.0
        return len(set(words)) / len(words)
