"""
Upload Validation Utilities

Checks uploaded files before any extraction work is done: declared type,
size, emptiness and, for PDFs, the file signature.
"""

from typing import Iterable
import logging

from sentiment_service.exceptions import UnsupportedFileType, ValidationFailure

logger = logging.getLogger(__name__)

PDF_SIGNATURE = b'%PDF-'


def validate_upload(
    file_content: bytes,
    mimetype: str,
    filename: str,
    allowed_types: Iterable[str],
    max_size: int
) -> None:
    """
    Validate an uploaded file

    Args:
        file_content: File bytes
        mimetype: Declared MIME type
        filename: Original filename
        allowed_types: Accepted MIME types
        max_size: Maximum size in bytes

    Raises:
        UnsupportedFileType: MIME type not accepted
        ValidationFailure: Empty, too large or not really a PDF
    """
    mimetype = (mimetype or "").lower()
    if mimetype not in set(allowed_types):
        raise UnsupportedFileType(mimetype)

    if len(file_content) == 0:
        raise ValidationFailure("File is empty", details=f"'{filename}' has no content")

    if len(file_content) > max_size:
        raise ValidationFailure(
            "File too large",
            details=f"File size exceeds maximum of {max_size // (1024 * 1024)}MB"
        )

    if mimetype == "application/pdf" and not is_pdf(file_content):
        raise ValidationFailure(
            "Invalid PDF file",
            details="File does not appear to be a valid PDF (invalid signature)"
        )

    logger.debug(f"Accepted upload '{filename}' ({mimetype}, {len(file_content)} bytes)")


def is_pdf(file_content: bytes) -> bool:
    """PDF files start with %PDF- (bytes: 25 50 44 46 2D)"""
    return len(file_content) >= 8 and file_content[:5] == PDF_SIGNATURE
