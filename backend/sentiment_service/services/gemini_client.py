"""
Gemini Client for Generative Text

This module provides a client for the Google Gemini `generateContent` REST
API, used to write short sentiment insights and to translate text.

API Reference:
- POST {base_url}/models/{model}:generateContent?key={api_key}
- Request: {"contents": [{"parts": [{"text": "..."}]}]}
- Response: {"candidates": [{"content": {"parts": [{"text": "..."}]}}]}

Example Usage:
    >>> client = GeminiClient(GeminiConfig(api_key="..."))
    >>> client.generate("Translate 'hola' to English")
    'hello'
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests.exceptions import ConnectionError, RequestException, Timeout

from sentiment_service.exceptions import SummarizationFailure

logger = logging.getLogger(__name__)


@dataclass
class GeminiConfig:
    """
    Configuration for Gemini client.

    Attributes:
        api_key: API key; the client is disabled without one
        base_url: Base URL of the Generative Language API
        model_name: Model identifier (default: gemini-pro)
        timeout: Request timeout in seconds
        max_retries: Retries on connection errors and timeouts
    """
    api_key: Optional[str] = None
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    model_name: str = "gemini-pro"
    timeout: int = 10
    max_retries: int = 1


class GeminiClientError(SummarizationFailure):
    """Base exception for Gemini client errors."""
    pass


class GeminiConnectionError(GeminiClientError):
    """Raised when the API cannot be reached."""
    pass


class GeminiModelError(GeminiClientError):
    """Raised when the model rejects the request or answers with no text."""
    pass


class GeminiTimeoutError(GeminiClientError):
    """Raised when request times out."""
    pass


class GeminiClient:
    """
    Client for the Gemini generateContent API.

    This client handles:
    - HTTP communication with the API
    - Retries with exponential backoff on connection errors and timeouts
    - Error classification (connection / timeout / model)

    Model errors (4xx, blocked prompts, empty candidates) are not retried.
    """

    def __init__(self, config: Optional[GeminiConfig] = None):
        self.config = config or GeminiConfig()
        self.generate_url = (
            f"{self.config.base_url.rstrip('/')}/models/"
            f"{self.config.model_name}:generateContent"
        )
        logger.info(
            f"Initialized GeminiClient with model '{self.config.model_name}' "
            f"(enabled={self.enabled})"
        )

    @property
    def enabled(self) -> bool:
        return bool(self.config.api_key)

    def generate(self, prompt: str) -> str:
        """
        Generate text from a prompt.

        Args:
            prompt: Input prompt

        Returns:
            str: Generated text, stripped

        Raises:
            GeminiConnectionError: API unreachable after retries
            GeminiTimeoutError: Request timed out after retries
            GeminiModelError: Missing key, rejected request or empty answer
            GeminiClientError: Other client errors
        """
        if not prompt or not prompt.strip():
            raise ValueError("Prompt cannot be empty")
        if not self.enabled:
            raise GeminiModelError("No Gemini API key configured")

        last_exception = None

        for attempt in range(self.config.max_retries + 1):
            try:
                if attempt > 0:
                    backoff_time = 2 ** (attempt - 1)
                    logger.info(
                        f"Retrying Gemini request (attempt {attempt + 1}/"
                        f"{self.config.max_retries + 1}) after {backoff_time}s"
                    )
                    time.sleep(backoff_time)

                response_text = self._make_request(prompt)
                logger.debug(
                    f"Gemini generated {len(response_text)} chars on attempt {attempt + 1}"
                )
                return response_text

            except (ConnectionError, Timeout) as e:
                last_exception = e
                logger.warning(f"Attempt {attempt + 1} failed: {type(e).__name__}: {e}")

        if isinstance(last_exception, Timeout):
            raise GeminiTimeoutError(
                f"Request timed out after {self.config.max_retries + 1} attempts "
                f"(timeout: {self.config.timeout}s)"
            ) from last_exception
        raise GeminiConnectionError(
            f"Failed to reach Gemini after {self.config.max_retries + 1} attempts"
        ) from last_exception

    def _make_request(self, prompt: str) -> str:
        """
        Make a single HTTP request to the API.

        Raises:
            ConnectionError / Timeout: Transport failures (retried by caller)
            GeminiModelError: Model error or invalid response
        """
        payload = {"contents": [{"parts": [{"text": prompt}]}]}

        logger.debug(
            f"Sending request to Gemini: model={self.config.model_name}, "
            f"prompt_length={len(prompt)}"
        )

        try:
            response = requests.post(
                self.generate_url,
                params={"key": self.config.api_key},
                json=payload,
                timeout=self.config.timeout
            )
        except (Timeout, ConnectionError):
            raise
        except RequestException as e:
            raise GeminiClientError(f"HTTP request failed: {e}") from e

        if response.status_code != 200:
            raise GeminiModelError(
                f"Gemini returned status {response.status_code}: {response.text[:200]}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise GeminiModelError(f"Invalid JSON response from Gemini: {response.text[:200]}") from e

        return self.extract_text(data)

    @staticmethod
    def extract_text(data: Dict[str, Any]) -> str:
        """Pull the first candidate's text out of a generateContent response."""
        try:
            text = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise GeminiModelError(f"Missing candidate text in Gemini output: {data}") from e
        return (text or "").strip()

    def health_check(self) -> Dict[str, Any]:
        """
        Report whether the client is configured.

        No request is made.
        """
        return {
            "status": "configured" if self.enabled else "disabled",
            "model": self.config.model_name,
            "available": self.enabled,
        }

    def __repr__(self) -> str:
        return f"GeminiClient(model='{self.config.model_name}', enabled={self.enabled})"
