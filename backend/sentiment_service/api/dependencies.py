"""
Service wiring and request dependencies.

Services are built once at startup (see main.lifespan) and registered here;
routes receive them through FastAPI's Depends so tests can swap in fakes
via app.dependency_overrides.
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import Header, HTTPException, status

from sentiment_service.config.settings import Settings, get_local_store_path
from sentiment_service.services.analysis_orchestrator import AnalysisOrchestrator
from sentiment_service.services.document_store import RestDocumentStore
from sentiment_service.services.event_dispatcher import EventDispatcher
from sentiment_service.services.gemini_client import GeminiClient, GeminiConfig
from sentiment_service.services.huggingface_client import HuggingFaceClient, HuggingFaceConfig
from sentiment_service.services.insight_service import Summarizer, Translator
from sentiment_service.services.language_detector import LanguageDetector
from sentiment_service.services.local_store import LocalRecordStore
from sentiment_service.services.ocr_engine import TesseractOCR
from sentiment_service.services.pdf_processor import PDFExtractor
from sentiment_service.services.persistence_gateway import PersistenceGateway
from sentiment_service.services.sentiment_classifier import SentimentClassifier
from sentiment_service.services.text_extractor import TextExtractor
from sentiment_service.services.text_validator import TextValidator
from sentiment_service.services.url_extractor import URLExtractor

logger = logging.getLogger(__name__)


# Global service instances (set at startup)
_orchestrator: Optional[AnalysisOrchestrator] = None
_gateway: Optional[PersistenceGateway] = None


def build_gateway(config: Settings) -> PersistenceGateway:
    """Persistence gateway from settings (remote store only when REMOTE_STORE_URL is set)"""
    remote = None
    if config.REMOTE_STORE_URL:
        remote = RestDocumentStore(
            config.REMOTE_STORE_URL,
            token=config.REMOTE_STORE_TOKEN,
            timeout=config.REQUEST_TIMEOUT
        )
    return PersistenceGateway(
        local=LocalRecordStore(Path(get_local_store_path())),
        remote=remote,
        events=EventDispatcher(config.ANALYTICS_URL, timeout=config.REQUEST_TIMEOUT),
        collection=config.REMOTE_STORE_COLLECTION,
        users_collection=config.USERS_COLLECTION
    )


def build_orchestrator(config: Settings, gateway: Optional[PersistenceGateway] = None) -> AnalysisOrchestrator:
    """Analysis pipeline from settings"""
    gemini = GeminiClient(GeminiConfig(
        api_key=config.GEMINI_API_KEY,
        base_url=config.GEMINI_BASE_URL,
        model_name=config.GEMINI_MODEL,
        timeout=config.REQUEST_TIMEOUT,
        max_retries=config.GEMINI_MAX_RETRIES
    ))
    huggingface = HuggingFaceClient(HuggingFaceConfig(
        api_url=config.HUGGINGFACE_API_URL,
        api_key=config.HUGGINGFACE_API_KEY,
        timeout=config.REQUEST_TIMEOUT
    ))
    extractor = TextExtractor(
        ocr_engine=TesseractOCR(language=config.TESSERACT_LANGUAGES, psm=config.TESSERACT_PSM),
        pdf_extractor=PDFExtractor(
            use_parser=config.PDF_USE_PARSER,
            max_output_chars=config.PDF_MAX_OUTPUT_CHARS
        ),
        url_extractor=URLExtractor(
            timeout=config.REQUEST_TIMEOUT,
            user_agent=config.URL_FETCH_USER_AGENT,
            max_bytes=config.URL_MAX_BYTES
        )
    )
    return AnalysisOrchestrator(
        extractor=extractor,
        validator=TextValidator(max_length=config.MAX_TEXT_LENGTH),
        language_detector=LanguageDetector(),
        classifier=SentimentClassifier(remote_client=huggingface),
        summarizer=Summarizer(gemini),
        translator=Translator(gemini),
        persistence=gateway,
        max_batch_size=config.MAX_BATCH_SIZE
    )


def set_services(orchestrator: Optional[AnalysisOrchestrator], gateway: Optional[PersistenceGateway]) -> None:
    """Register the global service instances."""
    global _orchestrator, _gateway
    _orchestrator = orchestrator
    _gateway = gateway


def get_orchestrator() -> AnalysisOrchestrator:
    """
    Get the analysis orchestrator.

    Raises:
        HTTPException: If services are not initialized
    """
    if _orchestrator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Analysis service not initialized. Application startup may have failed."
        )
    return _orchestrator


def get_gateway() -> PersistenceGateway:
    """
    Get the persistence gateway.

    Raises:
        HTTPException: If services are not initialized
    """
    if _gateway is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Persistence service not initialized. Application startup may have failed."
        )
    return _gateway


def get_optional_user(x_user_id: Optional[str] = Header(default=None)) -> Optional[str]:
    """Current user id from the auth layer, if any"""
    if x_user_id and x_user_id.strip():
        return x_user_id.strip()
    return None


def get_current_user(x_user_id: Optional[str] = Header(default=None)) -> str:
    """
    Current user id, required.

    Raises:
        HTTPException: 401 when the X-User-Id header is missing
    """
    user_id = get_optional_user(x_user_id)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required"
        )
    return user_id
