"""
Text Extraction Orchestration Service

This module turns raw inputs (uploaded images, PDFs, URLs) into plain text
candidates. Acts as a facade over the OCR engine, the PDF extractor and the
URL extractor.

Responsibilities:
- Route uploaded files to OCR or PDF extraction by MIME type
- Fetch and reduce web pages to text
- Record provenance of every extraction
"""

from dataclasses import dataclass
from typing import Optional
import logging

from sentiment_service.exceptions import UnsupportedFileType
from sentiment_service.services.ocr_engine import TesseractOCR
from sentiment_service.services.pdf_processor import PDFExtractor
from sentiment_service.services.url_extractor import URLExtractor

logger = logging.getLogger(__name__)


@dataclass
class ExtractionResult:
    """
    Raw extracted text plus provenance (transient, never persisted)

    Attributes:
        text: Extracted text, not yet validated
        source_kind: 'image', 'pdf', 'url' or 'text'
        source: Filename, URL or 'direct input'
        method: Strategy that produced the text
        mimetype: MIME type of an uploaded file
    """
    text: str
    source_kind: str
    source: str
    method: str
    mimetype: Optional[str] = None

    @property
    def source_info(self) -> str:
        """Human-readable provenance used in summaries"""
        if self.mimetype:
            return f"{self.source} ({self.mimetype})"
        return self.source


class TextExtractor:
    """
    High-level service for extracting text from user inputs

    Coordinates:
    - Image OCR
    - PDF heuristic extraction
    - URL fetching
    """

    def __init__(
        self,
        ocr_engine: Optional[TesseractOCR] = None,
        pdf_extractor: Optional[PDFExtractor] = None,
        url_extractor: Optional[URLExtractor] = None
    ):
        """Initialize text extractor with required services"""
        self.ocr_engine = ocr_engine or TesseractOCR()
        self.pdf_extractor = pdf_extractor or PDFExtractor()
        self.url_extractor = url_extractor or URLExtractor()

    def extract_from_file(
        self,
        content: bytes,
        mimetype: str,
        filename: str = "upload"
    ) -> ExtractionResult:
        """
        Extract text from an uploaded file

        Args:
            content: File bytes
            mimetype: Declared MIME type
            filename: Original filename (provenance only)

        Returns:
            ExtractionResult

        Raises:
            UnsupportedFileType: Neither an image nor a PDF
            OCRFailure / PDFExtractionFailure: Extraction failed
        """
        mimetype = (mimetype or "").lower()
        logger.info(f"Extracting text from file '{filename}' ({mimetype}, {len(content)} bytes)")

        if mimetype.startswith("image/"):
            text = self.ocr_engine.extract_text(content)
            return ExtractionResult(text, "image", filename, "ocr", mimetype)

        if mimetype == "application/pdf":
            text, method = self.pdf_extractor.extract_text(content)
            stats = self.pdf_extractor.get_extraction_stats(text, method)
            logger.info(
                f"PDF '{filename}': {stats['word_count']} words, {stats['char_count']} chars "
                f"via {stats['method']}{' (truncated)' if stats['truncated'] else ''}"
            )
            return ExtractionResult(text, "pdf", filename, method, mimetype)

        raise UnsupportedFileType(mimetype)

    def extract_from_url(self, url: str) -> ExtractionResult:
        """
        Extract text from a web page

        Raises:
            InvalidURL / URLFetchFailure / UnsupportedContentType
        """
        url = self.url_extractor.validate_url(url)
        text = self.url_extractor.extract_text(url)
        return ExtractionResult(text, "url", url, "http")

    @staticmethod
    def from_text(text: str) -> ExtractionResult:
        """Wrap directly supplied text so it flows through the same gate"""
        return ExtractionResult(text or "", "text", "direct input", "direct")
