"""
Unit Tests for PDF Text Extraction

Tests cover:
- Stream scan of BT...ET text objects
- Fallback to the byte-level heuristics when pdfplumber can't parse
- Corruption rejection and the no-text case
- Output capping
"""

import pytest
from unittest.mock import patch

from sentiment_service.exceptions import PDFExtractionFailure
from sentiment_service.services.pdf_processor import PDFExtractor


def make_pdf(content_stream: bytes) -> bytes:
    return (
        b"%PDF-1.4\n1 0 obj\n<< /Length 60 >>\nstream\n"
        + content_stream
        + b"\nendstream\nendobj\ntrailer\n%%EOF"
    )


@pytest.fixture
def extractor():
    return PDFExtractor(use_parser=False)


class TestStreamScan:
    """Text recovered from content streams"""

    def test_extracts_hello_world(self, extractor):
        pdf = make_pdf(b"BT /F1 24 Tf 100 700 Td (Hello World) Tj ET")

        text, method = extractor.extract_text(pdf)

        assert "Hello World" in text
        assert method == "stream"

    def test_joins_multiple_string_runs(self, extractor):
        pdf = make_pdf(
            b"BT /F1 12 Tf (The service was) Tj ET\n"
            b"BT /F1 12 Tf (absolutely wonderful) Tj ET"
        )

        text, _ = extractor.extract_text(pdf)

        assert "The service was" in text
        assert "absolutely wonderful" in text

    def test_parser_failure_falls_back_to_heuristics(self):
        pdf = make_pdf(b"BT /F1 24 Tf 100 700 Td (Hello World) Tj ET")

        with patch(
            "sentiment_service.services.pdf_processor.pdfplumber.open",
            side_effect=ValueError("not a real PDF")
        ):
            text, method = PDFExtractor(use_parser=True).extract_text(pdf)

        assert "Hello World" in text
        assert method == "stream"


class TestFailures:
    """Unreadable PDFs raise with a reason the API can map to hints"""

    def test_repetitive_garbage_is_corrupted(self, extractor):
        pdf = b"%PDF-1.4\n" + b"xq " * 200

        with pytest.raises(PDFExtractionFailure) as exc_info:
            extractor.extract_text(pdf)

        assert exc_info.value.reason == "corrupted"
        assert exc_info.value.suggestions

    def test_no_readable_text(self, extractor):
        pdf = bytes([0x00, 0x01, 0x02, 0x03, 0xFF, 0xFE]) * 50

        with pytest.raises(PDFExtractionFailure) as exc_info:
            extractor.extract_text(pdf)

        assert exc_info.value.reason == "no_text_found"
        assert exc_info.value.error == "No Text Found in PDF"


class TestCleanup:

    def test_output_capped_with_ellipsis(self):
        extractor = PDFExtractor(use_parser=False, max_output_chars=50)
        words = " ".join(f"word{i}" for i in range(100)).encode()
        pdf = make_pdf(b"BT (" + words + b") Tj ET")

        text, _ = extractor.extract_text(pdf)

        assert len(text) == 53
        assert text.endswith("...")

    def test_extraction_stats(self, extractor):
        stats = extractor.get_extraction_stats("Hello World", "stream")

        assert stats["method"] == "stream"
        assert stats["word_count"] == 2
        assert stats["truncated"] is False
