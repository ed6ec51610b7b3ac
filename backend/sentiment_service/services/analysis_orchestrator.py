"""
Analysis Orchestration Service

This module runs the end-to-end sentiment pipeline for every input kind
(direct text, uploaded file, URL, multi-input form and batch) and hands
finished results to the persistence gateway.

Pipeline per request:
    Extract -> Validate -> DetectLanguage -> (Translate?) -> Classify
            -> Summarize -> Assemble

Classification reads the translated text when a translation happened; the
summary is always written from the original-language text.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence
import logging
import time
import uuid

from sentiment_service.exceptions import (
    AmbiguousInput,
    BatchTooLarge,
    EmptyInput,
    NoInputProvided,
    ValidationFailure,
)
from sentiment_service.models.schemas import (
    AnalysisRecord,
    AnalysisResponse,
    BatchAnalysisResponse,
    InputKind,
    RecordMetadata,
    TranslationResponse,
)
from sentiment_service.services.insight_service import Summarizer, Translator, should_translate
from sentiment_service.services.language_detector import LanguageDetector
from sentiment_service.services.sentiment_classifier import (
    SentimentClassifier,
    get_primary_sentiment,
)
from sentiment_service.services.text_extractor import ExtractionResult, TextExtractor
from sentiment_service.services.text_validator import TextValidator

logger = logging.getLogger(__name__)


def _preview(text: str, length: int = 50) -> str:
    text = text or ""
    return text[:length] + ("..." if len(text) > length else "")


@dataclass
class UploadedFile:
    """File part of a multi-input request"""
    content: bytes
    mimetype: str
    filename: str = "upload"


class AnalysisOrchestrator:
    """
    End-to-end sentiment analysis pipeline

    Coordinates:
    1. Text extraction (TextExtractor)
    2. Validation (TextValidator)
    3. Language detection (LanguageDetector)
    4. Optional translation (Translator)
    5. Classification (SentimentClassifier)
    6. Summary generation (Summarizer)
    7. Persistence for signed-in users (PersistenceGateway)

    The orchestrator never retries; each collaborator owns its fallback.
    Extraction and validation failures propagate to the caller.

    Example:
        >>> orchestrator = AnalysisOrchestrator()
        >>> result = orchestrator.analyze_text("What a wonderful, happy day this is")
        >>> result.primary_sentiment.label
        <SentimentLabel.POSITIVE: 'POSITIVE'>
    """

    def __init__(
        self,
        extractor: Optional[TextExtractor] = None,
        validator: Optional[TextValidator] = None,
        language_detector: Optional[LanguageDetector] = None,
        classifier: Optional[SentimentClassifier] = None,
        summarizer: Optional[Summarizer] = None,
        translator: Optional[Translator] = None,
        persistence=None,
        max_batch_size: int = 50
    ):
        logger.info("Initializing Analysis Orchestrator")

        self.extractor = extractor or TextExtractor()
        self.validator = validator or TextValidator()
        self.language_detector = language_detector or LanguageDetector()
        self.classifier = classifier or SentimentClassifier()
        self.summarizer = summarizer or Summarizer()
        self.translator = translator or Translator()
        self.persistence = persistence
        self.max_batch_size = max_batch_size

        logger.info(
            f"Orchestrator ready: persistence={'on' if persistence else 'off'}, "
            f"max_batch_size={max_batch_size}"
        )

    # ------------------------------------------------------------------
    # Core pipeline
    # ------------------------------------------------------------------

    def _run_pipeline(
        self,
        extraction: ExtractionResult,
        auto_translate: bool,
        tag: str,
        summary_prefix: str = ""
    ) -> AnalysisResponse:
        start = time.perf_counter()

        validation = self.validator.validate(extraction.text)
        text = validation.clean_text
        if validation.truncated:
            logger.info(f"[{tag}] {validation.notice}")
        logger.info(
            f"[{tag}] Validated {extraction.source_kind} input "
            f"({len(text)} chars): '{_preview(text)}'"
        )

        detection = self.language_detector.detect_language(text)
        logger.info(
            f"[{tag}] Language: {detection.language_name} "
            f"({detection.iso_code}, confidence {detection.confidence:.2f})"
        )

        translated_text = None
        if should_translate(detection, auto_translate):
            translated = self.translator.translate(text, detection.language_name, "English")
            if translated and translated != text:
                translated_text = translated
                logger.info(f"[{tag}] Translated to English ({len(translated)} chars)")

        scores = self.classifier.classify(translated_text or text)
        primary = get_primary_sentiment(scores)
        logger.info(
            f"[{tag}] Sentiment: {primary.label.value} "
            f"(confidence {primary.confidence:.2f})"
        )

        summary = self.summarizer.generate_summary(
            text,
            detection.language_name,
            primary.label,
            primary.confidence
        )

        elapsed_ms = int(round((time.perf_counter() - start) * 1000))

        return AnalysisResponse(
            original_text=text,
            detected_language=detection,
            translated_text=translated_text,
            sentiment_scores=scores,
            primary_sentiment=primary,
            summary=f"{summary_prefix}{summary}",
            processing_time_ms=max(elapsed_ms, 0),
            notice=validation.notice
        )

    def _persist(
        self,
        response: AnalysisResponse,
        owner_id: Optional[str],
        input_kind: InputKind,
        metadata: Optional[RecordMetadata] = None
    ) -> AnalysisResponse:
        """Save for signed-in users; a failed save never fails the analysis"""
        if not owner_id or self.persistence is None:
            return response

        record = AnalysisRecord.from_analysis(response, owner_id, input_kind, metadata)
        result = self.persistence.save(record)
        response.record_id = result.record_id
        response.storage_status = result.status
        return response

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def analyze_text(
        self,
        text: Optional[str],
        auto_translate: bool = True,
        owner_id: Optional[str] = None
    ) -> AnalysisResponse:
        """
        Analyze directly supplied text

        Raises:
            ValidationFailure: Text rejected by the validator
        """
        tag = uuid.uuid4().hex[:8]
        logger.info(f"[{tag}] Text analysis requested")

        if not isinstance(text, str) or not text.strip():
            raise EmptyInput("Text is required and must be a non-empty string")

        response = self._run_pipeline(TextExtractor.from_text(text), auto_translate, tag)
        return self._persist(response, owner_id, InputKind.TEXT)

    def analyze_file(
        self,
        content: bytes,
        mimetype: str,
        filename: str = "upload",
        auto_translate: bool = True,
        owner_id: Optional[str] = None
    ) -> AnalysisResponse:
        """
        Analyze an uploaded image or PDF

        Raises:
            ExtractionFailure: OCR / PDF extraction failed or unsupported type
            ValidationFailure: Extracted text rejected by the validator
        """
        tag = uuid.uuid4().hex[:8]
        logger.info(f"[{tag}] File analysis requested: {filename} ({mimetype})")

        extraction = self.extractor.extract_from_file(content, mimetype, filename)
        logger.info(f"[{tag}] Extracted {len(extraction.text)} chars via {extraction.method}")

        response = self._run_pipeline(extraction, auto_translate, tag, "File Analysis: ")
        metadata = RecordMetadata(file_type=mimetype, file_name=filename)
        return self._persist(response, owner_id, InputKind.FILE, metadata)

    def analyze_url(
        self,
        url: Optional[str],
        auto_translate: bool = True,
        owner_id: Optional[str] = None
    ) -> AnalysisResponse:
        """
        Analyze the text of a web page

        Raises:
            ExtractionFailure: Bad URL, fetch failure or unsupported content
            ValidationFailure: Page text rejected by the validator
        """
        tag = uuid.uuid4().hex[:8]
        logger.info(f"[{tag}] URL analysis requested: {url}")

        extraction = self.extractor.extract_from_url(url)
        response = self._run_pipeline(
            extraction, auto_translate, tag, f"URL Analysis ({extraction.source}): "
        )
        return self._persist(
            response, owner_id, InputKind.URL, RecordMetadata(url=extraction.source)
        )

    def analyze_multi(
        self,
        text: Optional[str] = None,
        url: Optional[str] = None,
        upload: Optional[UploadedFile] = None,
        auto_translate: bool = True,
        owner_id: Optional[str] = None
    ) -> AnalysisResponse:
        """
        Analyze whichever single input a form supplied

        Raises:
            NoInputProvided: Nothing meaningful was supplied
            AmbiguousInput: More than one input was supplied
            ExtractionFailure / ValidationFailure: As for the single-kind paths
        """
        tag = uuid.uuid4().hex[:8]

        provided = []
        if upload is not None and upload.content:
            provided.append("file")
        if url and url.strip():
            provided.append("url")
        if text and text.strip():
            provided.append("text")

        if not provided:
            raise NoInputProvided()
        if len(provided) > 1:
            raise AmbiguousInput(provided)

        kind = provided[0]
        logger.info(f"[{tag}] Multi-input analysis requested ({kind})")

        if kind == "file":
            extraction = self.extractor.extract_from_file(
                upload.content, upload.mimetype, upload.filename
            )
            input_kind = InputKind.FILE
            metadata = RecordMetadata(file_type=upload.mimetype, file_name=upload.filename)
        elif kind == "url":
            extraction = self.extractor.extract_from_url(url.strip())
            input_kind = InputKind.URL
            metadata = RecordMetadata(url=extraction.source)
        else:
            extraction = TextExtractor.from_text(text.strip())
            input_kind = InputKind.TEXT
            metadata = None

        prefix = f"{kind.upper()} Analysis ({extraction.source_info}): "
        response = self._run_pipeline(extraction, auto_translate, tag, prefix)
        return self._persist(response, owner_id, input_kind, metadata)

    def analyze_batch(
        self,
        texts: Sequence,
        auto_translate: bool = True,
        owner_id: Optional[str] = None
    ) -> BatchAnalysisResponse:
        """
        Analyze up to max_batch_size texts sequentially

        Non-string, blank and validator-rejected entries are skipped.

        Raises:
            BatchTooLarge: More than max_batch_size entries (nothing is processed)
            ValidationFailure: Empty batch
        """
        tag = uuid.uuid4().hex[:8]

        if not isinstance(texts, (list, tuple)) or not texts:
            raise ValidationFailure("Texts must be a non-empty array")
        if len(texts) > self.max_batch_size:
            logger.info(f"[{tag}] Rejected batch of {len(texts)} texts")
            raise BatchTooLarge(self.max_batch_size)

        logger.info(f"[{tag}] Batch analysis requested ({len(texts)} texts)")
        start = time.perf_counter()
        results: List[AnalysisResponse] = []

        for index, item in enumerate(texts):
            if not isinstance(item, str) or not item.strip():
                logger.debug(f"[{tag}] Skipping invalid entry #{index}")
                continue
            try:
                results.append(
                    self._run_pipeline(TextExtractor.from_text(item), auto_translate, tag)
                )
            except ValidationFailure as e:
                logger.info(f"[{tag}] Skipping entry #{index}: {e.error}")

        total_ms = (time.perf_counter() - start) * 1000
        average_ms = int(round(total_ms / len(results))) if results else 0

        if owner_id:
            metadata = RecordMetadata(batch_size=len(results))
            for result in results:
                self._persist(result, owner_id, InputKind.BATCH, metadata)

        logger.info(f"[{tag}] Batch processed {len(results)}/{len(texts)} texts")

        return BatchAnalysisResponse(
            results=results,
            total_processed=len(results),
            average_processing_time_ms=average_ms
        )

    def translate(
        self,
        text: Optional[str],
        target_language: str = "en",
        source_language: Optional[str] = None
    ) -> TranslationResponse:
        """
        Translate text, detecting the source language when not given

        Raises:
            EmptyInput: No text supplied
        """
        if not isinstance(text, str) or not text.strip():
            raise EmptyInput("Text is required and must be a non-empty string")

        target_language = target_language or "en"
        if not source_language:
            source_language = self.language_detector.detect_language(text).language_name

        translated = self.translator.translate(
            text,
            self.language_detector.language_name(source_language),
            self.language_detector.language_name(target_language)
        )

        return TranslationResponse(
            original_text=text,
            translated_text=translated,
            source_language=source_language,
            target_language=target_language
        )
