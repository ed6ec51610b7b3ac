"""
Unit Tests for Text Validation

Tests cover:
- Empty / too short input
- Corruption, repetition and insufficient content
- Truncation of long text
- Non-Latin scripts pass the gate
"""

import pytest

from sentiment_service.exceptions import (
    EmptyInput,
    InsufficientContent,
    LikelyCorrupted,
    Repetitive,
    TooShort,
)
from sentiment_service.services.text_validator import TextValidator


@pytest.fixture
def validator():
    return TextValidator()


class TestRejections:

    @pytest.mark.parametrize("text", ["", "   ", "\n\t", None])
    def test_empty_input(self, validator, text):
        with pytest.raises(EmptyInput):
            validator.validate(text)

    def test_too_short(self, validator):
        with pytest.raises(TooShort):
            validator.validate("ok")

    def test_repetitive(self, validator):
        text = " ".join(["the"] * 21)

        with pytest.raises(Repetitive):
            validator.validate(text)

    def test_twenty_repeated_words_is_not_repetitive(self, validator):
        result = validator.validate(" ".join(["the"] * 20))

        assert result.clean_text.startswith("the the")

    def test_insufficient_content(self, validator):
        with pytest.raises(InsufficientContent):
            validator.validate("hi !! ??")

    def test_likely_corrupted(self, validator):
        with pytest.raises(LikelyCorrupted) as exc_info:
            validator.validate("\x01\x02\x03 ab \x04\x05\x06 cd \x07\x08 ef §§§§")

        assert "scanned document" in exc_info.value.error
        assert exc_info.value.suggestions


class TestAccepted:

    def test_valid_text_unchanged(self, validator):
        text = "This is a wonderful day full of joy and sunshine"

        result = validator.validate(text)

        assert result.clean_text == text
        assert result.truncated is False
        assert result.notice is None

    def test_whitespace_normalized(self, validator):
        result = validator.validate("  great   food\n\nand   friendly staff ")

        assert result.clean_text == "great food and friendly staff"

    def test_long_text_truncated(self):
        validator = TextValidator(max_length=100)
        text = " ".join(f"word{i}" for i in range(100))

        result = validator.validate(text)

        assert result.truncated is True
        assert result.clean_text.endswith("...")
        assert len(result.clean_text) == 103
        assert "100 characters" in result.notice

    def test_cyrillic_text_accepted(self, validator):
        text = "Это был прекрасный день и отличный сервис"

        result = validator.validate(text)

        assert result.clean_text == text


class TestRatios:

    def test_corruption_ratio_of_clean_text_is_zero(self):
        assert TextValidator.corruption_ratio("plain words here") == 0.0

    def test_unique_word_ratio(self):
        assert TextValidator.unique_word_ratio(["a", "a", "b", "b"]) == 0.5
        assert TextValidator.unique_word_ratio([]) == 1.0
