"""
Unit Tests for the Analysis Pipeline

Tests cover:
- Single text analysis end to end (local classifier, template summary)
- Truncation notice for overlong text
- Translation only feeding the classifier
- Batch limits, skipping and totals
- Multi-input selection and summary prefixes
- Persistence for signed-in users
"""

import pytest
from unittest.mock import MagicMock

from sentiment_service.exceptions import (
    AmbiguousInput,
    BatchTooLarge,
    EmptyInput,
    NoInputProvided,
    TooShort,
    ValidationFailure,
)
from sentiment_service.models.schemas import (
    LanguageDetectionResult,
    SentimentLabel,
    SentimentScore,
    StorageStatus,
)
from sentiment_service.services.analysis_orchestrator import AnalysisOrchestrator, UploadedFile
from sentiment_service.services.insight_service import Summarizer, Translator
from sentiment_service.services.text_extractor import ExtractionResult


POSITIVE_TEXT = "I absolutely love this wonderful product, it works great"
NEGATIVE_TEXT = "This was a terrible experience and the staff were awful"
LONG_TEXT = " ".join(a + b + c + d for a in "abcdef" for b in "abcdef" for c in "abcdef" for d in "abcdef")


def spanish_detector():
    detector = MagicMock()
    detector.detect_language.return_value = LanguageDetectionResult(
        language_name="Spanish", confidence=0.8, iso_code="es"
    )
    detector.language_name.side_effect = lambda code: {"es": "Spanish", "en": "English"}.get(code, code)
    return detector


def fixed_classifier():
    classifier = MagicMock()
    classifier.classify.return_value = [
        SentimentScore(label=SentimentLabel.POSITIVE, score=0.7),
        SentimentScore(label=SentimentLabel.NEGATIVE, score=0.1),
        SentimentScore(label=SentimentLabel.NEUTRAL, score=0.2),
    ]
    return classifier


class TestAnalyzeText:

    def test_positive_text(self, orchestrator):
        result = orchestrator.analyze_text(POSITIVE_TEXT)

        assert result.original_text == POSITIVE_TEXT
        assert result.detected_language.iso_code == "en"
        assert result.translated_text is None
        assert result.primary_sentiment.label == SentimentLabel.POSITIVE
        assert sum(s.score for s in result.sentiment_scores) == pytest.approx(1.0)
        assert "positive sentiment" in result.summary
        assert result.processing_time_ms >= 0
        assert result.record_id is None
        assert result.storage_status is None

    def test_negative_text(self, orchestrator):
        result = orchestrator.analyze_text(NEGATIVE_TEXT)

        assert result.primary_sentiment.label == SentimentLabel.NEGATIVE

    @pytest.mark.parametrize("text", [None, "", "   ", 42])
    def test_missing_text(self, orchestrator, text):
        with pytest.raises(EmptyInput):
            orchestrator.analyze_text(text)

    def test_validator_rejection_propagates(self, orchestrator):
        with pytest.raises(TooShort):
            orchestrator.analyze_text("ok")

    def test_overlong_text_is_truncated_with_notice(self, orchestrator):
        assert len(LONG_TEXT) > 5000

        result = orchestrator.analyze_text(LONG_TEXT)

        assert len(result.original_text) == 5003
        assert result.original_text.endswith("...")
        assert result.notice == "Text was truncated to 5000 characters for processing"

    def test_no_notice_for_regular_text(self, orchestrator):
        assert orchestrator.analyze_text(POSITIVE_TEXT).notice is None


class TestTranslation:

    def test_classifier_reads_translation_and_summary_reads_original(self, offline_gemini):
        original = "La comida es muy buena y el servicio excelente"
        translated = "The food is very good and the service excellent"
        translator = MagicMock()
        translator.translate.return_value = translated
        classifier = fixed_classifier()
        summarizer = MagicMock()
        summarizer.generate_summary.return_value = "Resumen"

        orchestrator = AnalysisOrchestrator(
            language_detector=spanish_detector(),
            classifier=classifier,
            summarizer=summarizer,
            translator=translator
        )
        result = orchestrator.analyze_text(original)

        translator.translate.assert_called_once_with(original, "Spanish", "English")
        classifier.classify.assert_called_once_with(translated)
        assert summarizer.generate_summary.call_args[0][0] == original
        assert result.original_text == original
        assert result.translated_text == translated

    def test_auto_translate_off(self):
        translator = MagicMock()
        classifier = fixed_classifier()
        orchestrator = AnalysisOrchestrator(
            language_detector=spanish_detector(),
            classifier=classifier,
            summarizer=MagicMock(generate_summary=MagicMock(return_value="Resumen")),
            translator=translator
        )

        result = orchestrator.analyze_text("La comida es muy buena", auto_translate=False)

        translator.translate.assert_not_called()
        classifier.classify.assert_called_once_with("La comida es muy buena")
        assert result.translated_text is None

    def test_failed_translation_is_omitted(self, offline_gemini):
        classifier = fixed_classifier()
        orchestrator = AnalysisOrchestrator(
            language_detector=spanish_detector(),
            classifier=classifier,
            summarizer=Summarizer(offline_gemini),
            translator=Translator(offline_gemini)
        )

        result = orchestrator.analyze_text("La comida es muy buena")

        assert result.translated_text is None
        classifier.classify.assert_called_once_with("La comida es muy buena")

    def test_translate_endpoint_detects_source(self, offline_gemini):
        orchestrator = AnalysisOrchestrator(
            language_detector=spanish_detector(),
            translator=Translator(offline_gemini)
        )

        result = orchestrator.translate("Hola amigos")

        assert result.source_language == "Spanish"
        assert result.target_language == "en"
        assert result.translated_text == "Hola amigos"

    def test_translate_resolves_codes(self):
        translator = MagicMock()
        translator.translate.return_value = "Hello friends"
        orchestrator = AnalysisOrchestrator(language_detector=spanish_detector(), translator=translator)

        result = orchestrator.translate("Hola amigos", target_language="en", source_language="es")

        translator.translate.assert_called_once_with("Hola amigos", "Spanish", "English")
        assert result.translated_text == "Hello friends"
        assert result.source_language == "es"

    def test_translate_requires_text(self, orchestrator):
        with pytest.raises(EmptyInput):
            orchestrator.translate("  ")


class TestBatch:

    def test_oversized_batch_rejected_before_processing(self, offline_gemini):
        classifier = fixed_classifier()
        orchestrator = AnalysisOrchestrator(
            classifier=classifier,
            summarizer=Summarizer(offline_gemini),
            translator=Translator(offline_gemini)
        )

        with pytest.raises(BatchTooLarge) as exc_info:
            orchestrator.analyze_batch([POSITIVE_TEXT] * 51)

        assert exc_info.value.error == "Maximum 50 texts allowed per batch"
        classifier.classify.assert_not_called()

    def test_fifty_texts_allowed(self, orchestrator):
        result = orchestrator.analyze_batch([POSITIVE_TEXT] * 50)

        assert result.total_processed == 50

    def test_invalid_entries_skipped(self, orchestrator):
        result = orchestrator.analyze_batch([POSITIVE_TEXT, "", None, 7, "ok", NEGATIVE_TEXT])

        assert result.total_processed == 2
        assert [r.primary_sentiment.label for r in result.results] == [
            SentimentLabel.POSITIVE, SentimentLabel.NEGATIVE
        ]
        assert result.average_processing_time_ms >= 0

    def test_all_invalid_gives_empty_result(self, orchestrator):
        result = orchestrator.analyze_batch(["", "   "])

        assert result.total_processed == 0
        assert result.results == []
        assert result.average_processing_time_ms == 0

    @pytest.mark.parametrize("texts", [[], None, "not a list"])
    def test_requires_non_empty_list(self, orchestrator, texts):
        with pytest.raises(ValidationFailure):
            orchestrator.analyze_batch(texts)

    def test_batch_results_saved_for_user(self, orchestrator, fake_remote):
        orchestrator.analyze_batch([POSITIVE_TEXT, NEGATIVE_TEXT], owner_id="user-1")

        saved = fake_remote.records()
        assert len(saved) == 2
        assert {doc["inputKind"] for doc in saved} == {"batch"}
        assert all(doc["metadata"]["batchSize"] == 2 for doc in saved)


class TestMultiInput:

    def test_no_input(self, orchestrator):
        with pytest.raises(NoInputProvided):
            orchestrator.analyze_multi(text="  ", url="", upload=None)

    def test_more_than_one_input(self, orchestrator):
        with pytest.raises(AmbiguousInput) as exc_info:
            orchestrator.analyze_multi(text=POSITIVE_TEXT, url="https://example.com")

        assert "url, text" in exc_info.value.details

    def test_text_prefix(self, orchestrator):
        result = orchestrator.analyze_multi(text=POSITIVE_TEXT)

        assert result.summary.startswith("TEXT Analysis (direct input): ")

    def test_file_prefix(self, offline_gemini, local_classifier):
        extractor = MagicMock()
        extractor.extract_from_file.return_value = ExtractionResult(
            POSITIVE_TEXT, "image", "photo.png", "ocr", "image/png"
        )
        orchestrator = AnalysisOrchestrator(
            extractor=extractor,
            classifier=local_classifier,
            summarizer=Summarizer(offline_gemini),
            translator=Translator(offline_gemini)
        )

        result = orchestrator.analyze_multi(
            upload=UploadedFile(content=b"png", mimetype="image/png", filename="photo.png")
        )

        assert result.summary.startswith("FILE Analysis (photo.png (image/png)): ")
        extractor.extract_from_file.assert_called_once_with(b"png", "image/png", "photo.png")

    def test_url_prefix(self, offline_gemini, local_classifier):
        extractor = MagicMock()
        extractor.extract_from_url.return_value = ExtractionResult(
            POSITIVE_TEXT, "url", "https://example.com", "http"
        )
        orchestrator = AnalysisOrchestrator(
            extractor=extractor,
            classifier=local_classifier,
            summarizer=Summarizer(offline_gemini),
            translator=Translator(offline_gemini)
        )

        result = orchestrator.analyze_multi(url=" https://example.com ")

        assert result.summary.startswith("URL Analysis (https://example.com): ")


class TestSingleKindPrefixes:

    def test_file_analysis_prefix(self, offline_gemini, local_classifier):
        extractor = MagicMock()
        extractor.extract_from_file.return_value = ExtractionResult(
            POSITIVE_TEXT, "pdf", "review.pdf", "stream", "application/pdf"
        )
        orchestrator = AnalysisOrchestrator(
            extractor=extractor,
            classifier=local_classifier,
            summarizer=Summarizer(offline_gemini),
            translator=Translator(offline_gemini)
        )

        result = orchestrator.analyze_file(b"%PDF-1.4", "application/pdf", "review.pdf")

        assert result.summary.startswith("File Analysis: ")

    def test_url_analysis_prefix(self, offline_gemini, local_classifier):
        extractor = MagicMock()
        extractor.extract_from_url.return_value = ExtractionResult(
            POSITIVE_TEXT, "url", "https://example.com/review", "http"
        )
        orchestrator = AnalysisOrchestrator(
            extractor=extractor,
            classifier=local_classifier,
            summarizer=Summarizer(offline_gemini),
            translator=Translator(offline_gemini)
        )

        result = orchestrator.analyze_url("https://example.com/review")

        assert result.summary.startswith("URL Analysis (https://example.com/review): ")


class TestPersistence:

    def test_saved_for_signed_in_user(self, orchestrator, fake_remote):
        result = orchestrator.analyze_text(POSITIVE_TEXT, owner_id="user-1")

        assert result.storage_status == StorageStatus.SAVED
        assert result.record_id in fake_remote.collections["sentiments"]
        assert fake_remote.records()[0]["ownerId"] == "user-1"

    def test_anonymous_not_saved(self, orchestrator, fake_remote):
        orchestrator.analyze_text(POSITIVE_TEXT)

        assert fake_remote.records() == []

    def test_redirected_locally_on_permission_error(self, orchestrator, fake_remote, permission_denied):
        fake_remote.fail_with = permission_denied

        result = orchestrator.analyze_text(POSITIVE_TEXT, owner_id="user-1")

        assert result.storage_status == StorageStatus.SAVED_LOCALLY
        assert result.record_id.startswith("local_")
