"""Services package - Business logic layer"""
from sentiment_service.services.fallback import FallbackChain, Strategy, RecoverableError
from sentiment_service.services.pdf_processor import PDFExtractor
from sentiment_service.services.ocr_engine import TesseractOCR
from sentiment_service.services.url_extractor import URLExtractor
from sentiment_service.services.text_extractor import TextExtractor, ExtractionResult
from sentiment_service.services.text_validator import TextValidator, ValidationResult
from sentiment_service.services.language_detector import LanguageDetector
from sentiment_service.services.sentiment_classifier import (
    SentimentClassifier,
    LocalSentimentAnalyzer,
    get_primary_sentiment,
)
from sentiment_service.services.insight_service import Summarizer, Translator
from sentiment_service.services.analysis_orchestrator import AnalysisOrchestrator
from sentiment_service.services.persistence_gateway import PersistenceGateway
from sentiment_service.services.local_store import LocalRecordStore
from sentiment_service.services.document_store import RestDocumentStore

__all__ = [
    "FallbackChain",
    "Strategy",
    "RecoverableError",
    "PDFExtractor",
    "TesseractOCR",
    "URLExtractor",
    "TextExtractor",
    "ExtractionResult",
    "TextValidator",
    "ValidationResult",
    "LanguageDetector",
    "SentimentClassifier",
    "LocalSentimentAnalyzer",
    "get_primary_sentiment",
    "Summarizer",
    "Translator",
    "AnalysisOrchestrator",
    "PersistenceGateway",
    "LocalRecordStore",
    "RestDocumentStore"
]
