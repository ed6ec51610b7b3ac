"""
Service Exception Taxonomy

All user-actionable failures raised by the extraction and validation
stages derive from SentimentServiceError and carry everything the HTTP
layer needs to build an error response: status code, short error title,
optional details and remediation suggestions.

Classification and generation failures are the bases of the external
clients' errors (HuggingFaceClientError, GeminiClientError); each is
absorbed by a local fallback and never reaches the caller. Persistence
failures are absorbed by the local store.
"""

from typing import List, Optional


PDF_SUGGESTIONS = [
    "Try converting the PDF to text format using a PDF reader",
    "Use an image file instead (JPEG, PNG)",
    "Check if the PDF is password-protected",
    "Ensure the PDF contains actual text, not just scanned images",
]


class SentimentServiceError(Exception):
    """Base exception for all service errors."""

    status_code: int = 500

    def __init__(
        self,
        error: str,
        details: Optional[str] = None,
        suggestions: Optional[List[str]] = None,
        status_code: Optional[int] = None
    ):
        super().__init__(details or error)
        self.error = error
        self.details = details
        self.suggestions = suggestions or []
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        body = {"error": self.error}
        if self.details:
            body["details"] = self.details
        if self.suggestions:
            body["suggestions"] = list(self.suggestions)
        return body


# ============================================================================
# Extraction
# ============================================================================

class ExtractionFailure(SentimentServiceError):
    """Text could not be extracted from the supplied input."""
    status_code = 400


class UnsupportedFileType(ExtractionFailure):
    """Uploaded file type is not an accepted image or PDF type."""

    def __init__(self, mimetype: str):
        super().__init__(
            "Unsupported file type",
            details=f"Invalid file type '{mimetype}'. Only images and PDFs are allowed.",
            suggestions=["Upload a JPEG, PNG, GIF, WEBP image or a PDF document"]
        )
        self.mimetype = mimetype


class InvalidURL(ExtractionFailure):
    """URL is malformed or does not use http/https."""

    def __init__(self, url: str, reason: str = "Invalid URL protocol"):
        super().__init__(
            "Failed to process URL",
            details=f"Failed to extract text from URL: {reason}",
            suggestions=["Provide a full http:// or https:// address"]
        )
        self.url = url


class UnsupportedContentType(ExtractionFailure):
    """Fetched URL returned a content type other than HTML or plain text."""

    def __init__(self, content_type: str):
        super().__init__(
            "Failed to process URL",
            details=f"Failed to extract text from URL: Unsupported content type '{content_type or 'unknown'}'",
            suggestions=["Link to an HTML page or a plain-text document"]
        )
        self.content_type = content_type


class URLFetchFailure(ExtractionFailure):
    """Network failure or non-2xx status while fetching a URL."""

    def __init__(self, url: str, reason: str):
        super().__init__(
            "Failed to process URL",
            details=f"Failed to extract text from URL: {reason}",
            suggestions=[
                "Check that the page is publicly reachable",
                "Paste the page text directly instead",
            ]
        )
        self.url = url


class OCRFailure(ExtractionFailure):
    """OCR engine failed to read the uploaded image."""

    def __init__(self, details: str):
        super().__init__(
            "Failed to process uploaded file",
            details=details,
            suggestions=[
                "Use a clearer, higher-resolution image",
                "Paste the text directly instead",
            ]
        )


class PDFExtractionFailure(ExtractionFailure):
    """
    PDF text recovery failed.

    Attributes:
        reason: 'no_text_found', 'corrupted' or 'extraction_failed'
    """

    TITLES = {
        "corrupted": (
            "PDF Text Extraction Failed",
            "The PDF appears to be a scanned document or image-based PDF that cannot be "
            "processed as text. Try converting the PDF to text format or using an image file instead."
        ),
        "no_text_found": (
            "No Text Found in PDF",
            "This PDF appears to contain no extractable text. It might be a scanned document, "
            "image-based PDF, or password-protected file."
        ),
        "extraction_failed": (
            "PDF Processing Error",
            "Unable to extract text from this PDF. The file might be corrupted, "
            "password-protected, or in an unsupported format."
        ),
    }

    def __init__(self, reason: str, message: Optional[str] = None):
        title, details = self.TITLES.get(reason, self.TITLES["extraction_failed"])
        super().__init__(title, details=details, suggestions=PDF_SUGGESTIONS)
        self.reason = reason
        self.message = message or details

    def __str__(self) -> str:
        return self.message


# ============================================================================
# Validation
# ============================================================================

class ValidationFailure(SentimentServiceError):
    """Input text or request shape is not acceptable for analysis."""
    status_code = 400


class EmptyInput(ValidationFailure):
    def __init__(self, details: str = "No text could be extracted from the file"):
        super().__init__(details)


class TooShort(ValidationFailure):
    def __init__(self):
        super().__init__("Extracted text is too short for meaningful analysis")


class LikelyCorrupted(ValidationFailure):
    def __init__(self):
        super().__init__(
            "Extracted text appears to be corrupted or unreadable. This might be a scanned "
            "document or image-based PDF. Try converting the PDF to text format or using an "
            "image file instead.",
            suggestions=PDF_SUGGESTIONS
        )


class Repetitive(ValidationFailure):
    def __init__(self):
        super().__init__(
            "Extracted text appears to be repetitive or meaningless. This might be a "
            "corrupted PDF or scanned document."
        )


class InsufficientContent(ValidationFailure):
    def __init__(self):
        super().__init__(
            "Insufficient meaningful text for analysis. Please provide at least 3 meaningful words."
        )


class BatchTooLarge(ValidationFailure):
    def __init__(self, max_size: int):
        super().__init__(f"Maximum {max_size} texts allowed per batch")


class NoInputProvided(ValidationFailure):
    def __init__(self):
        super().__init__(
            "No input provided. Please provide text, upload a file, or specify a URL."
        )


class AmbiguousInput(ValidationFailure):
    def __init__(self, provided):
        super().__init__(
            "Multiple inputs provided. Please provide only one of text, file or URL.",
            details=f"Received: {', '.join(provided)}"
        )


# ============================================================================
# Absorbed failures
# ============================================================================

class ClassificationFailure(SentimentServiceError):
    """Base of the external classifier client errors; absorbed by the local classifier."""
    status_code = 502


class SummarizationFailure(SentimentServiceError):
    """Base of the generative client errors; absorbed by template or passthrough fallbacks."""
    status_code = 502


class PersistenceFailure(SentimentServiceError):
    """Remote or local record storage failed."""
    status_code = 503


class PermissionDeniedError(PersistenceFailure):
    """Remote store rejected the request (permission class)."""


class StoreUnavailableError(PersistenceFailure):
    """Remote store could not be reached (connectivity class)."""


class RecordNotFound(PersistenceFailure):
    status_code = 404

    def __init__(self, record_id: str):
        super().__init__("Record not found", details=f"Record {record_id} not found")
        self.record_id = record_id
