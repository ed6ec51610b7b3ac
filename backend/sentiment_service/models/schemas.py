"""
Pydantic Models and Schemas

This module defines all data models and validation schemas used across the API.
Uses Pydantic for automatic validation and serialization.

Field names are snake_case in Python and camelCase on the wire
(originalText, detectedLanguage, ...), which is what the web client sends
and expects.

Responsibilities:
- Request/Response models
- Analysis record structure (unit of work and unit of storage)
- Enumerations for labels, input kinds and record origin
"""

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone
from enum import Enum


class SentimentLabel(str, Enum):
    """Canonical sentiment labels"""
    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"
    NEUTRAL = "NEUTRAL"


class InputKind(str, Enum):
    """How the analyzed text reached the service"""
    TEXT = "text"
    FILE = "file"
    URL = "url"
    BATCH = "batch"


class RecordOrigin(str, Enum):
    """Where a persisted record currently lives"""
    REMOTE = "remote"
    LOCAL = "local"


class StorageStatus(str, Enum):
    """Outcome of persisting an analysis for the current user"""
    SAVED = "saved"
    SAVED_LOCALLY = "saved_locally"
    NOT_SAVED = "not_saved"


class CamelModel(BaseModel):
    """Base model serializing field names as camelCase"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


# ============================================================================
# Pipeline building blocks
# ============================================================================

class LanguageDetectionResult(CamelModel):
    """Dominant language of a text"""
    language_name: str = Field(..., description="Human-readable language name")
    confidence: float = Field(..., ge=0.0, le=1.0)
    iso_code: str = Field(..., description="ISO 639-1 code")


class SentimentScore(CamelModel):
    """Score of a single sentiment label"""
    label: SentimentLabel
    score: float = Field(..., ge=0.0, le=1.0)


class PrimarySentiment(CamelModel):
    """Highest-scoring label of a score distribution"""
    label: SentimentLabel
    confidence: float = Field(..., ge=0.0, le=1.0)


# ============================================================================
# Requests
# ============================================================================

class AnalysisRequest(CamelModel):
    """Request body for single text analysis"""
    text: Optional[str] = None
    auto_translate: bool = True


class BatchAnalysisRequest(CamelModel):
    """Request body for batch analysis (invalid entries are skipped)"""
    texts: List[Any] = Field(default_factory=list)
    auto_translate: bool = True


class URLAnalysisRequest(CamelModel):
    """Request body for URL analysis"""
    url: Optional[str] = None
    auto_translate: bool = True


class TranslationRequest(CamelModel):
    """Request body for translation"""
    text: Optional[str] = None
    target_language: str = "en"
    source_language: Optional[str] = None


class RecordUpdate(CamelModel):
    """User-editable record fields"""
    tags: Optional[List[str]] = None
    favorite: Optional[bool] = None


# ============================================================================
# Responses
# ============================================================================

class AnalysisResponse(CamelModel):
    """Result of one analysis run"""
    original_text: str
    detected_language: LanguageDetectionResult
    translated_text: Optional[str] = None
    sentiment_scores: List[SentimentScore]
    primary_sentiment: PrimarySentiment
    summary: str
    processing_time_ms: int = Field(..., ge=0)
    notice: Optional[str] = Field(None, description="Non-fatal notice, e.g. the text was truncated")
    record_id: Optional[str] = None
    storage_status: Optional[StorageStatus] = None


class BatchAnalysisResponse(CamelModel):
    """Result of a batch analysis run"""
    results: List[AnalysisResponse]
    total_processed: int
    average_processing_time_ms: int


class TranslationResponse(CamelModel):
    """Result of a translation request"""
    original_text: str
    translated_text: str
    source_language: str
    target_language: str


class RestoreReport(CamelModel):
    """Outcome of a reconciliation run"""
    remote_reachable: bool
    synced: int = 0
    failed: int = 0
    remaining: int = 0


class SaveResult(CamelModel):
    """Outcome of a gateway save"""
    record_id: Optional[str] = None
    origin: Optional[RecordOrigin] = None
    status: StorageStatus


class ErrorResponse(CamelModel):
    """Standard error response"""
    error: str
    details: Optional[str] = None
    suggestions: Optional[List[str]] = None


class HealthCheckResponse(CamelModel):
    """Health check response model"""
    status: str
    services: Dict[str, str]
    pending_sync: int = 0
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# ============================================================================
# Persistence
# ============================================================================

class RecordMetadata(CamelModel):
    """Provenance details kept with a record"""
    file_type: Optional[str] = None
    file_name: Optional[str] = None
    url: Optional[str] = None
    batch_size: Optional[int] = None


class AnalysisRecord(CamelModel):
    """
    Persisted analysis owned by a single user

    `id` is assigned by the remote store, or is a locally generated
    `local_<timestamp>_<random>` id when the record was redirected to local
    storage. `origin` carries that distinction explicitly; only the storage
    layer reads or writes the id prefix.

    Immutable after creation: owner_id, input_kind, original_text, created_at.
    Mutable: tags, favorite.
    """
    id: Optional[str] = None
    owner_id: str
    input_kind: InputKind
    original_text: str
    translated_text: Optional[str] = None
    detected_language: LanguageDetectionResult
    sentiment_scores: List[SentimentScore]
    primary_sentiment: PrimarySentiment
    summary: str
    processing_time_ms: int = Field(..., ge=0)
    metadata: RecordMetadata = Field(default_factory=RecordMetadata)
    tags: List[str] = Field(default_factory=list)
    favorite: bool = False
    created_at: Optional[datetime] = None
    origin: RecordOrigin = RecordOrigin.REMOTE

    @classmethod
    def from_analysis(
        cls,
        analysis: AnalysisResponse,
        owner_id: str,
        input_kind: InputKind,
        metadata: Optional[RecordMetadata] = None
    ) -> "AnalysisRecord":
        """Build an unsaved record from a finished analysis"""
        return cls(
            owner_id=owner_id,
            input_kind=input_kind,
            original_text=analysis.original_text,
            translated_text=analysis.translated_text,
            detected_language=analysis.detected_language,
            sentiment_scores=analysis.sentiment_scores,
            primary_sentiment=analysis.primary_sentiment,
            summary=analysis.summary,
            processing_time_ms=analysis.processing_time_ms,
            metadata=metadata or RecordMetadata(),
        )

    def to_document(self) -> Dict[str, Any]:
        """Serialize for a document store (no id, no origin)"""
        return self.model_dump(
            mode="json",
            by_alias=True,
            exclude={"id", "origin"},
        )

    @classmethod
    def from_document(
        cls,
        document: Dict[str, Any],
        record_id: Optional[str] = None,
        origin: RecordOrigin = RecordOrigin.REMOTE
    ) -> "AnalysisRecord":
        """Rebuild a record from a stored document"""
        data = {k: v for k, v in document.items() if k not in ("id", "origin")}
        return cls.model_validate({
            **data,
            "id": record_id or document.get("id"),
            "origin": origin,
        })

    def matches(self, term: str) -> bool:
        """Case-insensitive match over text, summary and tags"""
        term = (term or "").lower()
        if not term:
            return True
        haystack = [self.original_text, self.summary] + list(self.tags)
        return any(term in (value or "").lower() for value in haystack)
