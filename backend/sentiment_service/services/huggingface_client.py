"""
Hugging Face Inference Client for Sentiment Classification

This module provides a client for the hosted Hugging Face Inference API
running a three-class sentiment model
(cardiffnlp/twitter-roberta-base-sentiment-latest by default).

API Reference:
- POST {model_url}
- Request: {"inputs": "..."} with "Authorization: Bearer <token>"
- Response: [[{"label": "positive", "score": 0.97}, {"label": "neutral", ...}, ...]]

Older checkpoints answer with LABEL_0/LABEL_1/LABEL_2 (negative, neutral,
positive), which are mapped the same way.

Example Usage:
    >>> client = HuggingFaceClient(HuggingFaceConfig(api_key="hf_..."))
    >>> client.classify("What a great day")
    {<SentimentLabel.POSITIVE: 'POSITIVE'>: 0.98, ...}
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests.exceptions import ConnectionError, RequestException, Timeout

from sentiment_service.exceptions import ClassificationFailure
from sentiment_service.models.schemas import SentimentLabel

logger = logging.getLogger(__name__)


LABEL_MAP: Dict[str, SentimentLabel] = {
    "negative": SentimentLabel.NEGATIVE,
    "neutral": SentimentLabel.NEUTRAL,
    "positive": SentimentLabel.POSITIVE,
    "label_0": SentimentLabel.NEGATIVE,
    "label_1": SentimentLabel.NEUTRAL,
    "label_2": SentimentLabel.POSITIVE,
    "neg": SentimentLabel.NEGATIVE,
    "neu": SentimentLabel.NEUTRAL,
    "pos": SentimentLabel.POSITIVE,
}

# Positional order of models that answer with unnamed labels
POSITIONAL_LABELS = [SentimentLabel.NEGATIVE, SentimentLabel.NEUTRAL, SentimentLabel.POSITIVE]


@dataclass
class HuggingFaceConfig:
    """
    Configuration for the Hugging Face client.

    Attributes:
        api_url: Model inference endpoint
        api_key: Access token; the client is disabled without one
        timeout: Request timeout in seconds
    """
    api_url: str = (
        "https://api-inference.huggingface.co/models/"
        "cardiffnlp/twitter-roberta-base-sentiment-latest"
    )
    api_key: Optional[str] = None
    timeout: int = 10


class HuggingFaceClientError(ClassificationFailure):
    """Base exception for Hugging Face client errors."""
    pass


class HuggingFaceAuthError(HuggingFaceClientError):
    """Raised on missing or rejected credentials."""
    pass


class HuggingFaceRateLimitError(HuggingFaceClientError):
    """Raised when the API answers 429 or the model is still loading."""
    pass


class HuggingFaceResponseError(HuggingFaceClientError):
    """Raised when the response cannot be mapped to sentiment scores."""
    pass


class HuggingFaceClient:
    """
    Client for the Hugging Face Inference API.

    No retries: callers fall back to the local classifier on any error.
    """

    def __init__(self, config: Optional[HuggingFaceConfig] = None):
        self.config = config or HuggingFaceConfig()
        logger.info(
            f"Initialized HuggingFaceClient at {self.config.api_url} "
            f"(enabled={self.enabled})"
        )

    @property
    def enabled(self) -> bool:
        return bool(self.config.api_key)

    def classify(self, text: str) -> Dict[SentimentLabel, float]:
        """
        Classify text and return normalized scores.

        Args:
            text: Text to classify

        Returns:
            Raw score per canonical label (not yet normalized)

        Raises:
            HuggingFaceAuthError: No API key, or 401/403
            HuggingFaceRateLimitError: 429 or 503 (model loading)
            HuggingFaceResponseError: Non-2xx or unparseable body
            HuggingFaceClientError: Transport failures
        """
        if not self.enabled:
            raise HuggingFaceAuthError("No Hugging Face API key configured")

        logger.debug(f"Calling Hugging Face sentiment API (text_length={len(text)})")

        try:
            response = requests.post(
                self.config.api_url,
                headers={
                    "Authorization": f"Bearer {self.config.api_key}",
                    "Content-Type": "application/json",
                },
                json={"inputs": text},
                timeout=self.config.timeout
            )
        except Timeout as e:
            raise HuggingFaceClientError(
                f"Request timed out after {self.config.timeout}s"
            ) from e
        except ConnectionError as e:
            raise HuggingFaceClientError(f"Connection error: {e}") from e
        except RequestException as e:
            raise HuggingFaceClientError(f"HTTP request failed: {e}") from e

        if response.status_code in (401, 403):
            raise HuggingFaceAuthError(f"API rejected credentials ({response.status_code})")
        if response.status_code in (429, 503):
            raise HuggingFaceRateLimitError(
                f"API unavailable ({response.status_code}): {response.text[:200]}"
            )
        if response.status_code != 200:
            raise HuggingFaceResponseError(
                f"API request failed: {response.status_code} {response.text[:200]}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise HuggingFaceResponseError(
                f"Invalid JSON response: {response.text[:200]}"
            ) from e

        return self.parse_response(data)

    @staticmethod
    def parse_response(data: Any) -> Dict[SentimentLabel, float]:
        """
        Map an inference response onto the canonical labels.

        Raises:
            HuggingFaceResponseError: Shape or labels not recognized
        """
        if isinstance(data, dict) and "error" in data:
            raise HuggingFaceResponseError(f"API error: {data['error']}")

        if not isinstance(data, list) or not data:
            raise HuggingFaceResponseError("Invalid API response format")

        entries = data[0] if isinstance(data[0], list) else data
        if not entries or not all(isinstance(e, dict) and "score" in e for e in entries):
            raise HuggingFaceResponseError("Invalid API response format")

        raw: Dict[SentimentLabel, float] = {}
        labels = [str(e.get("label", "")).lower() for e in entries]

        if all(label in LABEL_MAP for label in labels):
            for label, entry in zip(labels, entries):
                raw[LABEL_MAP[label]] = raw.get(LABEL_MAP[label], 0.0) + float(entry["score"])
        elif len(entries) == len(POSITIONAL_LABELS):
            for label, entry in zip(POSITIONAL_LABELS, entries):
                raw[label] = float(entry["score"])
        else:
            raise HuggingFaceResponseError(f"Unrecognized labels: {labels}")

        return raw

    def __repr__(self) -> str:
        return f"HuggingFaceClient(api_url='{self.config.api_url}', enabled={self.enabled})"
