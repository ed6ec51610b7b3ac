"""
PDF Processing Service

This module recovers plain text from raw PDF bytes for sentiment analysis.
Uploaded PDFs are often exported from office tools, scanned, or partially
broken, so extraction runs a series of increasingly permissive strategies
and accepts the first one that yields enough readable text.

Responsibilities:
- Structured page-text extraction (using pdfplumber), when enabled
- Stream scan of BT...ET text objects
- General readable-text scan of the whole buffer
- Section-marker scan around PDF object references
- Last-resort token scan
- Cleanup, corruption check and output capping of the accepted candidate
"""

from typing import Callable, List, Tuple
import io
import logging
import re

import pdfplumber

from sentiment_service.exceptions import PDFExtractionFailure

logger = logging.getLogger(__name__)


# Characters considered readable inside a string literal
READABLE_CHARS = re.compile(r'[a-zA-Z0-9\s.,!?;:()\[\]{}"\'`~@#$%^&*+=|\\/<>-]')

# Characters stripped during cleanup (anything not word/space/common punctuation)
SPECIAL_CHARS = re.compile(r'[^\w\s.,!?;:()\[\]{}"\'`~@#$%^&*+=|\\/<>-]')

CONTROL_CHARS = re.compile(r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]')
NON_PRINTABLE = re.compile(r'[^\x20-\x7E]')

TEXT_OBJECT = re.compile(r'BT[\s\S]*?ET')
STRING_RUN = re.compile(r'\((.*?)\)|<(.*?)>')

READABLE_PATTERNS = [
    re.compile(r'[A-Za-z]{2,}'),    # words with 2+ letters
    re.compile(r'[0-9]+'),          # numbers
    re.compile(r'[A-Za-z\s]{5,}'),  # longer alphabetic runs
]

SECTION_MARKERS = [
    re.compile(r'/Text\s+(\d+)\s+\d+\s+R'),
    re.compile(r'/Contents\s+(\d+)\s+\d+\s+R'),
    re.compile(r'/Page\s+(\d+)\s+\d+\s+R'),
    re.compile(r'/Font\s+(\d+)\s+\d+\s+R'),
    re.compile(r'/Resources\s+(\d+)\s+\d+\s+R'),
]


class CorruptedTextError(ValueError):
    """Cleanup rejected a candidate as repetitive garbage."""
    pass


class PDFExtractor:
    """
    Extracts text from PDF bytes with cascading heuristics

    Strategy order:
    1. pdfplumber page text (optional, needs a well-formed PDF)
    2. Stream scan: string literals inside BT...ET text objects
    3. General readable-text scan
    4. Section-marker scan
    5. Last-resort scan (lower acceptance threshold)

    Every accepted candidate is cleaned, checked for corruption and capped.
    """

    def __init__(
        self,
        use_parser: bool = True,
        min_text_length: int = 20,
        min_last_resort_length: int = 10,
        max_output_chars: int = 2000,
        section_window: int = 2000,
        readable_ratio: float = 0.4
    ):
        """
        Initialize PDF extractor

        Args:
            use_parser: Try pdfplumber before the byte-level heuristics
            min_text_length: Minimum characters for a heuristic to be accepted
            min_last_resort_length: Minimum characters for the last-resort scan
            max_output_chars: Cap on returned text (an ellipsis marks truncation)
            section_window: Bytes read after each section marker
            readable_ratio: Share of readable chars a string run must exceed
        """
        self.use_parser = use_parser
        self.min_text_length = min_text_length
        self.min_last_resort_length = min_last_resort_length
        self.max_output_chars = max_output_chars
        self.section_window = section_window
        self.readable_ratio = readable_ratio
        logger.info("PDFExtractor initialized")

    def extract_text(self, pdf_bytes: bytes) -> Tuple[str, str]:
        """
        Extract readable text from raw PDF bytes

        This is the main entry point.

        Args:
            pdf_bytes: Raw PDF file content

        Returns:
            Tuple of (cleaned_text, method_name)

        Raises:
            PDFExtractionFailure: reason 'corrupted' when the accepted text is
                repetitive garbage, 'no_text_found' when no strategy yields
                enough text, 'extraction_failed' on unexpected errors

        Example:
            >>> extractor = PDFExtractor()
            >>> text, method = extractor.extract_text(open("review.pdf", "rb").read())
        """
        logger.info(f"Starting PDF text extraction ({len(pdf_bytes)} bytes)")

        try:
            if self.use_parser:
                parsed = self._extract_with_parser(pdf_bytes)
                if len(parsed.strip()) >= self.min_text_length:
                    logger.info("Extracted text with pdfplumber")
                    return self._clean_extracted_text(parsed), "parser"

            # Latin-1 maps every byte to one code point, like a binary string
            pdf_string = pdf_bytes.decode('latin-1')

            heuristics: List[Tuple[str, Callable[[str], str], int]] = [
                ("stream", self._extract_text_streams, 1),
                ("readable", self._extract_readable_text, self.min_text_length),
                ("sections", self._extract_from_sections, self.min_text_length),
                ("last_resort", self._extract_last_resort_text, self.min_last_resort_length),
            ]

            for method, heuristic, min_length in heuristics:
                candidate = heuristic(pdf_string)
                if len(candidate.strip()) >= min_length:
                    logger.info(f"Extracted text with '{method}' scan")
                    return self._clean_extracted_text(candidate), method
                logger.debug(f"'{method}' scan yielded {len(candidate)} chars, trying next method")

            logger.warning("All PDF extraction methods failed")
            raise PDFExtractionFailure(
                "no_text_found",
                "No readable text found in PDF. This might be a scanned document or image-based PDF."
            )

        except PDFExtractionFailure:
            raise
        except CorruptedTextError as e:
            logger.warning(f"PDF text rejected: {e}")
            raise PDFExtractionFailure("corrupted", str(e)) from e
        except Exception as e:
            logger.error(f"PDF extraction error: {str(e)}", exc_info=True)
            raise PDFExtractionFailure(
                "extraction_failed",
                "Failed to extract text from PDF. Please try converting to image or using a different file."
            ) from e

    def _extract_with_parser(self, pdf_bytes: bytes) -> str:
        """
        Extract page text with pdfplumber

        Returns an empty string when the document cannot be parsed so the
        byte-level heuristics get their turn.
        """
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
            return " ".join(pages)
        except Exception as e:
            logger.debug(f"pdfplumber could not parse document: {e}")
            return ""

    def _extract_text_streams(self, pdf_string: str) -> str:
        """
        Pull string literals out of BT...ET text objects

        Keeps only runs whose readable-character share exceeds the
        configured ratio.
        """
        extracted: List[str] = []
        for block in TEXT_OBJECT.findall(pdf_string):
            for match in STRING_RUN.finditer(block):
                literal = re.sub(r'[()<>]', '', match.group(0))
                if literal and self._is_readable(literal):
                    extracted.append(literal)
        return " ".join(extracted)

    def _is_readable(self, text: str) -> bool:
        """Check if text is mostly readable characters"""
        clean = text.strip()
        if len(clean) < 2:
            return False
        readable = READABLE_CHARS.findall(clean)
        return len(readable) / len(clean) > self.readable_ratio

    def _extract_readable_text(self, pdf_string: str) -> str:
        """Collect word-like, numeric and alphabetic-run tokens from the buffer"""
        text = CONTROL_CHARS.sub(' ', pdf_string)
        text = NON_PRINTABLE.sub(' ', text)
        text = re.sub(r'\s+', ' ', text).strip()

        parts = []
        for pattern in READABLE_PATTERNS:
            matches = pattern.findall(text)
            if matches:
                parts.append(" ".join(matches))
        return " ".join(parts).strip()

    def _extract_from_sections(self, pdf_string: str) -> str:
        """Read a printable window after the first hit of each object marker"""
        parts = []
        for marker in SECTION_MARKERS:
            match = marker.search(pdf_string)
            if match:
                section = pdf_string[match.start():match.start() + self.section_window]
                section = NON_PRINTABLE.sub(' ', section)
                parts.append(re.sub(r'\s+', ' ', section).strip())
        return " ".join(parts).strip()

    def _extract_last_resort_text(self, pdf_string: str) -> str:
        """Keep whitespace-separated tokens with 2+ word chars and a letter"""
        text = CONTROL_CHARS.sub(' ', pdf_string)
        text = re.sub(r'\s+', ' ', text).strip()

        words = []
        for word in text.split(' '):
            clean = re.sub(r'[^\w]', '', word)
            if len(clean) > 1 and re.search(r'[a-zA-Z]', clean):
                words.append(word)
        return " ".join(words)

    def _clean_extracted_text(self, text: str) -> str:
        """
        Normalize, strip special characters, reject garbage, cap length

        Raises:
            CorruptedTextError: unique-word ratio < 0.3 over more than 20 words
        """
        cleaned = re.sub(r'\s+', ' ', text)
        cleaned = SPECIAL_CHARS.sub('', cleaned)
        cleaned = re.sub(r'\s+', ' ', cleaned).strip()

        words = cleaned.split(' ')
        unique_ratio = len(set(words)) / len(words)
        if unique_ratio < 0.3 and len(words) > 20:
            raise CorruptedTextError('Extracted text appears to be corrupted or unreadable.')

        if len(cleaned) > self.max_output_chars:
            cleaned = cleaned[:self.max_output_chars] + '...'

        return cleaned

    def get_extraction_stats(self, text: str, method: str) -> dict:
        """
        Get statistics about an extraction

        Args:
            text: Text returned by extract_text
            method: Method name returned by extract_text

        Returns:
            Dictionary with extraction statistics
        """
        words = text.split()
        return {
            'method': method,
            'char_count': len(text),
            'word_count': len(words),
            'truncated': text.endswith('...') and len(text) > self.max_output_chars,
        }
