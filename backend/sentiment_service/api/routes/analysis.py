"""
Sentiment Analysis API Routes

Responsibilities:
- POST /analyze - Analyze direct text
- POST /analyze/batch - Analyze up to MAX_BATCH_SIZE texts
- POST /analyze/file - Analyze an uploaded image or PDF
- POST /analyze/url - Analyze a web page
- POST /analyze/multi - Analyze whichever one of text / file / URL a form sends
- POST /translate - Translate text

Routes are plain `def` so blocking I/O (HTTP calls, OCR) runs in the
threadpool. Extraction and validation errors propagate to the exception
handlers registered in main.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from sentiment_service.api.dependencies import get_optional_user, get_orchestrator
from sentiment_service.config.settings import settings
from sentiment_service.models.schemas import (
    AnalysisRequest,
    AnalysisResponse,
    BatchAnalysisRequest,
    BatchAnalysisResponse,
    ErrorResponse,
    TranslationRequest,
    TranslationResponse,
    URLAnalysisRequest,
)
from sentiment_service.services.analysis_orchestrator import AnalysisOrchestrator, UploadedFile
from sentiment_service.utils.validators import validate_upload

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["analysis"],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
        500: {"model": ErrorResponse, "description": "Internal server error"}
    }
)


def _read_upload(file: UploadFile) -> UploadedFile:
    content = file.file.read()
    filename = file.filename or "upload"
    mimetype = file.content_type or ""
    validate_upload(
        content,
        mimetype,
        filename,
        settings.ALLOWED_FILE_TYPES,
        settings.MAX_UPLOAD_SIZE
    )
    return UploadedFile(content=content, mimetype=mimetype.lower(), filename=filename)


@router.post(
    "/analyze",
    response_model=AnalysisResponse,
    response_model_exclude_none=True
)
def analyze_text(
    request: AnalysisRequest,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
    user_id: Optional[str] = Depends(get_optional_user)
):
    """Analyze the sentiment of a piece of text"""
    return orchestrator.analyze_text(
        request.text,
        auto_translate=request.auto_translate,
        owner_id=user_id
    )


@router.post(
    "/analyze/batch",
    response_model=BatchAnalysisResponse,
    response_model_exclude_none=True
)
def analyze_batch(
    request: BatchAnalysisRequest,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
    user_id: Optional[str] = Depends(get_optional_user)
):
    """
    Analyze several texts in one request

    Invalid entries are skipped; more than MAX_BATCH_SIZE entries are
    rejected before anything is processed.
    """
    return orchestrator.analyze_batch(
        request.texts,
        auto_translate=request.auto_translate,
        owner_id=user_id
    )


@router.post(
    "/analyze/file",
    response_model=AnalysisResponse,
    response_model_exclude_none=True
)
def analyze_file(
    file: UploadFile = File(...),
    autoTranslate: bool = Form(True),
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
    user_id: Optional[str] = Depends(get_optional_user)
):
    """Analyze text extracted from an uploaded image (OCR) or PDF"""
    upload = _read_upload(file)
    return orchestrator.analyze_file(
        upload.content,
        upload.mimetype,
        upload.filename,
        auto_translate=autoTranslate,
        owner_id=user_id
    )


@router.post(
    "/analyze/url",
    response_model=AnalysisResponse,
    response_model_exclude_none=True
)
def analyze_url(
    request: URLAnalysisRequest,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
    user_id: Optional[str] = Depends(get_optional_user)
):
    """Analyze the text of a web page"""
    return orchestrator.analyze_url(
        request.url,
        auto_translate=request.auto_translate,
        owner_id=user_id
    )


@router.post(
    "/analyze/multi",
    response_model=AnalysisResponse,
    response_model_exclude_none=True
)
def analyze_multi(
    text: Optional[str] = Form(None),
    url: Optional[str] = Form(None),
    autoTranslate: bool = Form(True),
    file: Optional[UploadFile] = File(None),
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
    user_id: Optional[str] = Depends(get_optional_user)
):
    """Analyze exactly one of text, file or URL sent as a multipart form"""
    upload = _read_upload(file) if file is not None and file.filename else None
    return orchestrator.analyze_multi(
        text=text,
        url=url,
        upload=upload,
        auto_translate=autoTranslate,
        owner_id=user_id
    )


@router.post("/translate", response_model=TranslationResponse)
def translate(
    request: TranslationRequest,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)
):
    """Translate text (target defaults to English, source is detected when omitted)"""
    return orchestrator.translate(
        request.text,
        target_language=request.target_language,
        source_language=request.source_language
    )
