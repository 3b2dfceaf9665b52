"""
HTTP client for the proxy relay.

The blocking requests call runs in a worker thread so the event loop keeps
serving other handlers while a completion is outstanding.
"""

import asyncio
import requests
from typing import Any, Dict, List, Optional

from app_config import RELAY_URL, RELAY_TIMEOUT_SECONDS
from chat_logger import get_logger

logger = get_logger("routine_advisor")


class RelayError(Exception):
    """Transport failure or non-2xx answer from the relay."""


class RelayClient:
    def __init__(
        self,
        url: str = RELAY_URL,
        timeout: Optional[float] = RELAY_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    async def send(self, messages: List[Dict[str, str]]) -> Any:
        """POST {"messages": [...]} and return the decoded JSON response."""
        return await asyncio.to_thread(self._post, messages)

    def _post(self, messages: List[Dict[str, str]]) -> Any:
        try:
            response = self.session.post(
                self.url,
                json={"messages": messages},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Relay | POST {self.url} failed | error={e}")
            raise RelayError(str(e) or "Request failed") from e

        if not response.ok:
            logger.warning(f"Relay | POST {self.url} | status={response.status_code}")
            raise RelayError(f"Network error: {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Relay | POST {self.url} | response is not JSON")
            raise RelayError(f"Invalid JSON response: {e}") from e

        logger.debug(f"Relay | POST {self.url} | status={response.status_code} | messages={len(messages)}")
        return data
