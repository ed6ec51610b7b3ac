"""
Best-effort analytics events.

Events are logged and, when ANALYTICS_URL is configured, posted to the
collector. A failed dispatch is logged and discarded; it never reaches the
caller.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)


class EventDispatcher:
    """Fire-and-forget event sink."""

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: int = 10,
        session: Optional[requests.Session] = None
    ):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def dispatch(self, name: str, params: Optional[Dict[str, Any]] = None) -> bool:
        """
        Send one event.

        Returns:
            bool: True if the collector accepted it
        """
        params = params or {}
        logger.info(f"Event {name}: {params}")

        if not self.url:
            return False

        payload = {
            "event": name,
            "params": params,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        try:
            response = self.session.post(self.url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            return True
        except Exception as e:
            logger.warning(f"Discarded event {name}: {type(e).__name__}: {e}")
            return False
