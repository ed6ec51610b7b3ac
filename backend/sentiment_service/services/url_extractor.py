"""
URL content extraction for analyzing web pages.

Fetches a single page within a time budget and a byte cap, using a
descriptive user agent, then reduces HTML to visible text. Only HTML and
plain-text responses are accepted.
"""

import logging
import re
import time
from typing import Optional
from urllib.parse import urlparse

import requests

from sentiment_service.exceptions import (
    InvalidURL,
    UnsupportedContentType,
    URLFetchFailure,
)

logger = logging.getLogger(__name__)

SCRIPT_BLOCK = re.compile(r'<script[^>]*>.*?</script>', re.IGNORECASE | re.DOTALL)
STYLE_BLOCK = re.compile(r'<style[^>]*>.*?</style>', re.IGNORECASE | re.DOTALL)
ANY_TAG = re.compile(r'<[^>]*>')


def html_to_text(html: str) -> str:
    """Strip scripts, styles and tags from HTML and collapse whitespace."""
    text = SCRIPT_BLOCK.sub('', html)
    text = STYLE_BLOCK.sub('', text)
    text = ANY_TAG.sub(' ', text)
    return re.sub(r'\s+', ' ', text).strip()


class URLExtractor:
    """Fetches web pages and returns their readable text."""

    def __init__(self,
                 timeout: int = 10,
                 user_agent: str = "SentimentAI-Bot/1.0",
                 max_bytes: int = 2 * 1024 * 1024,
                 session: Optional[requests.Session] = None):
        """
        Initialize URL extractor.

        Args:
            timeout: Budget in seconds for the whole fetch, body included
            user_agent: User-Agent string for requests
            max_bytes: Largest response body read before giving up
            session: Optional pre-configured session (tests inject one)
        """
        self.timeout = timeout
        self.max_bytes = max_bytes
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": user_agent,
            "Accept": "text/html,text/plain;q=0.9,*/*;q=0.5",
        })

    @staticmethod
    def validate_url(url: str) -> str:
        """
        Check that a URL is absolute and uses http or https.

        Returns:
            The stripped URL

        Raises:
            InvalidURL: Missing, malformed or non-http(s) URL
        """
        url = (url or "").strip()
        if not url:
            raise InvalidURL(url, "URL is required")

        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https"):
            raise InvalidURL(url, "Invalid URL protocol")
        if not parsed.netloc:
            raise InvalidURL(url, "Invalid URL")
        return url

    def extract_text(self, url: str) -> str:
        """
        Fetch a URL and extract its text.

        The body is streamed so both the byte cap and the overall deadline
        hold even for slow or oversized pages.

        Args:
            url: http(s) URL to fetch

        Returns:
            Visible text of the page (may be empty; validation happens later)

        Raises:
            InvalidURL: Bad scheme or malformed URL
            URLFetchFailure: Network error, timeout, oversized body or non-2xx status
            UnsupportedContentType: Response is neither HTML nor plain text
        """
        url = self.validate_url(url)
        logger.info(f"Fetching URL for analysis: {url}")

        deadline = time.monotonic() + self.timeout
        response = None
        try:
            response = self.session.get(url, timeout=self.timeout, stream=True)
            response.raise_for_status()

            content_type = (response.headers.get("content-type") or "").lower()
            if "text/html" not in content_type and "text/plain" not in content_type:
                logger.warning(f"Unsupported content type from {url}: {content_type!r}")
                raise UnsupportedContentType(content_type)

            body = self._read_body(response, url, deadline)
        except requests.exceptions.Timeout as e:
            logger.warning(f"Timed out fetching {url} after {self.timeout}s")
            raise URLFetchFailure(url, f"timeout of {self.timeout}s exceeded") from e
        except requests.exceptions.RequestException as e:
            logger.warning(f"Request failed for {url}: {e}")
            raise URLFetchFailure(url, str(e)) from e
        finally:
            if response is not None:
                response.close()

        if "text/html" in content_type:
            text = html_to_text(body)
        else:
            text = body.strip()

        logger.debug(f"Extracted {len(text)} chars from {url}")
        return text

    def _read_body(self, response, url: str, deadline: float) -> str:
        """
        Read and decode a streamed body within the byte cap and deadline

        Raises:
            URLFetchFailure: Body exceeds max_bytes or the deadline passes
        """
        chunks = []
        received = 0
        for chunk in response.iter_content(chunk_size=8192):
            received += len(chunk)
            if received > self.max_bytes:
                logger.warning(f"Response from {url} exceeds {self.max_bytes} bytes")
                raise URLFetchFailure(url, f"response larger than {self.max_bytes} bytes")
            if time.monotonic() > deadline:
                logger.warning(f"Fetching {url} exceeded {self.timeout}s")
                raise URLFetchFailure(url, f"timeout of {self.timeout}s exceeded")
            chunks.append(chunk)

        raw = b"".join(chunks)
        try:
            return raw.decode(response.encoding or "utf-8", errors="replace")
        except LookupError:
            return raw.decode("utf-8", errors="replace")
