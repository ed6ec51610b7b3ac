"""
OCR Engine

Thin wrapper around Tesseract (via pytesseract) for reading text out of
uploaded images. There is no retry: any failure to open the image or run
Tesseract is surfaced as an OCRFailure so the caller can ask the user for a
different input.
"""

import io
import logging

import pytesseract
from PIL import Image, UnidentifiedImageError

from sentiment_service.exceptions import OCRFailure

logger = logging.getLogger(__name__)


class TesseractOCR:
    """
    Runs Tesseract OCR over image bytes

    Example:
        >>> ocr = TesseractOCR(language="eng")
        >>> text = ocr.extract_text(open("receipt.png", "rb").read())
    """

    def __init__(self, language: str = "eng", psm: int = 6, oem: int = 3):
        """
        Args:
            language: Tesseract language code(s), e.g. 'eng' or 'eng+spa'
            psm: Page segmentation mode (6 = uniform block of text)
            oem: OCR Engine mode (3 = default, based on what is available)
        """
        self.language = language
        self.psm = psm
        self.oem = oem

    @property
    def config(self) -> str:
        return f'--oem {self.oem} --psm {self.psm} -l {self.language}'

    def extract_text(self, image_bytes: bytes) -> str:
        """
        Recognize text in an image

        Args:
            image_bytes: Raw image file content (JPEG, PNG, GIF, WEBP)

        Returns:
            Recognized text, stripped

        Raises:
            OCRFailure: Image cannot be decoded or Tesseract fails
        """
        try:
            image = Image.open(io.BytesIO(image_bytes))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            logger.error(f"Could not decode image: {e}")
            raise OCRFailure(f"Could not read the uploaded image: {e}") from e

        # Palette and alpha images read better flattened to RGB
        if image.mode not in ("RGB", "L"):
            image = image.convert("RGB")

        try:
            text = pytesseract.image_to_string(image, config=self.config)
        except pytesseract.TesseractNotFoundError as e:
            logger.error(
                "Tesseract not found. Install Tesseract OCR:\n"
                "Linux: sudo apt-get install tesseract-ocr\n"
                "macOS: brew install tesseract"
            )
            raise OCRFailure("OCR engine is not available on the server") from e
        except Exception as e:
            logger.error(f"Tesseract execution failed: {str(e)}")
            raise OCRFailure(f"OCR failed: {e}") from e

        text = text.strip()
        logger.info(f"OCR recognized {len(text)} characters")
        return text
