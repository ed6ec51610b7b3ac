"""Data models package"""
from sentiment_service.models.schemas import (
    SentimentLabel,
    InputKind,
    RecordOrigin,
    StorageStatus,
    LanguageDetectionResult,
    SentimentScore,
    PrimarySentiment,
    AnalysisRequest,
    BatchAnalysisRequest,
    URLAnalysisRequest,
    TranslationRequest,
    RecordUpdate,
    AnalysisResponse,
    BatchAnalysisResponse,
    TranslationResponse,
    RestoreReport,
    SaveResult,
    ErrorResponse,
    HealthCheckResponse,
    RecordMetadata,
    AnalysisRecord
)

__all__ = [
    "SentimentLabel",
    "InputKind",
    "RecordOrigin",
    "StorageStatus",
    "LanguageDetectionResult",
    "SentimentScore",
    "PrimarySentiment",
    "AnalysisRequest",
    "BatchAnalysisRequest",
    "URLAnalysisRequest",
    "TranslationRequest",
    "RecordUpdate",
    "AnalysisResponse",
    "BatchAnalysisResponse",
    "TranslationResponse",
    "RestoreReport",
    "SaveResult",
    "ErrorResponse",
    "HealthCheckResponse",
    "RecordMetadata",
    "AnalysisRecord"
]
