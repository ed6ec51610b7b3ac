"""
Pytest Configuration and Fixtures

Shared fixtures and configuration for all tests.
"""

import pytest
import sys
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from sentiment_service.exceptions import PermissionDeniedError, StoreUnavailableError  # noqa: E402
from sentiment_service.models.schemas import (  # noqa: E402
    AnalysisRecord,
    InputKind,
    LanguageDetectionResult,
    PrimarySentiment,
    SentimentLabel,
    SentimentScore,
)
from sentiment_service.services.analysis_orchestrator import AnalysisOrchestrator  # noqa: E402
from sentiment_service.services.gemini_client import GeminiClient, GeminiConfig  # noqa: E402
from sentiment_service.services.huggingface_client import (  # noqa: E402
    HuggingFaceClient,
    HuggingFaceConfig,
)
from sentiment_service.services.insight_service import Summarizer, Translator  # noqa: E402
from sentiment_service.services.local_store import LocalRecordStore  # noqa: E402
from sentiment_service.services.persistence_gateway import PersistenceGateway  # noqa: E402
from sentiment_service.services.sentiment_classifier import SentimentClassifier  # noqa: E402


class InMemoryDocumentStore:
    """
    Stand-in for RestDocumentStore

    Set `fail_with` to an exception instance to make every call raise it.
    """

    def __init__(self):
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.fail_with: Optional[Exception] = None
        self.calls: List[str] = []

    def _check(self, operation: str):
        self.calls.append(operation)
        if self.fail_with is not None:
            raise self.fail_with

    def _collection(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self.collections.setdefault(name, {})

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        self._check("add")
        doc_id = uuid.uuid4().hex[:20]
        self._collection(collection)[doc_id] = dict(data)
        return doc_id

    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        self._check("get")
        document = self._collection(collection).get(doc_id)
        return {**document, "id": doc_id} if document is not None else None

    def set(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self._check("set")
        self._collection(collection)[doc_id] = dict(data)

    def update(self, collection: str, doc_id: str, patch: Dict[str, Any]) -> None:
        self._check("update")
        self._collection(collection)[doc_id].update(patch)

    def delete(self, collection: str, doc_id: str) -> None:
        self._check("delete")
        self._collection(collection).pop(doc_id, None)

    def query(self, collection, filters=None, order_by=None, descending=True, limit=None):
        self._check("query")
        documents = [
            {**doc, "id": doc_id}
            for doc_id, doc in self._collection(collection).items()
            if all(doc.get(k) == v for k, v in (filters or {}).items())
        ]
        if order_by:
            documents.sort(key=lambda d: d.get(order_by) or "", reverse=descending)
        return documents[:limit] if limit else documents

    def records(self, collection: str = "sentiments") -> List[Dict[str, Any]]:
        return [d for d in self._collection(collection).values() if not d.get("reachabilityCheck")]


@pytest.fixture
def temp_test_dir(tmp_path):
    """
    Create temporary directory for test files
    """
    test_dir = tmp_path / "test_data"
    test_dir.mkdir()
    return test_dir


@pytest.fixture
def fake_remote():
    return InMemoryDocumentStore()


@pytest.fixture
def permission_denied():
    return PermissionDeniedError(
        "Remote store permission denied",
        details="403: Missing or insufficient permissions."
    )


@pytest.fixture
def store_unavailable():
    return StoreUnavailableError("Remote store unavailable", details="connection refused")


@pytest.fixture
def local_store(temp_test_dir):
    return LocalRecordStore(temp_test_dir / "local_store")


@pytest.fixture
def gateway(local_store, fake_remote):
    return PersistenceGateway(local=local_store, remote=fake_remote)


@pytest.fixture
def offline_gemini():
    """Gemini client without an API key (template / passthrough fallbacks only)"""
    return GeminiClient(GeminiConfig(api_key=None))


@pytest.fixture
def local_classifier():
    """Classifier without an API key (local heuristic only)"""
    return SentimentClassifier(remote_client=HuggingFaceClient(HuggingFaceConfig(api_key=None)))


@pytest.fixture
def orchestrator(offline_gemini, local_classifier, gateway):
    return AnalysisOrchestrator(
        classifier=local_classifier,
        summarizer=Summarizer(offline_gemini),
        translator=Translator(offline_gemini),
        persistence=gateway
    )


@pytest.fixture
def make_record():
    """Factory for unsaved analysis records"""
    def _make(owner_id: str = "user-1", text: str = "I love this product", **overrides):
        data = dict(
            owner_id=owner_id,
            input_kind=InputKind.TEXT,
            original_text=text,
            detected_language=LanguageDetectionResult(
                language_name="English", confidence=0.8, iso_code="en"
            ),
            sentiment_scores=[
                SentimentScore(label=SentimentLabel.POSITIVE, score=0.8),
                SentimentScore(label=SentimentLabel.NEGATIVE, score=0.1),
                SentimentScore(label=SentimentLabel.NEUTRAL, score=0.1),
            ],
            primary_sentiment=PrimarySentiment(label=SentimentLabel.POSITIVE, confidence=0.8),
            summary="Upbeat and favorable.",
            processing_time_ms=12,
        )
        data.update(overrides)
        return AnalysisRecord(**data)
    return _make
