"""Utilities package - Helper functions"""
from sentiment_service.utils.validators import validate_upload, is_pdf

__all__ = [
    "validate_upload",
    "is_pdf"
]
