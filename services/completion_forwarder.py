"""
Completion Forwarder — server side of the proxy relay.

Attaches the server-held credential and forwards a message list to an
OpenAI-compatible chat completions endpoint. The upstream JSON is returned
untouched; this module never adds or edits messages.
"""

import time
import requests
from typing import Any, Dict, List, Optional, Tuple

from app_config import OPENAI_API_KEY, OPENAI_API_URL, OPENAI_MODEL, LLM_TIMEOUT_SECONDS
from chat_logger import get_logger

logger = get_logger("routine_advisor")


class CompletionForwarder:
    def __init__(
        self,
        api_key: str = OPENAI_API_KEY,
        api_url: str = OPENAI_API_URL,
        model: str = OPENAI_MODEL,
        timeout: int = LLM_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.model = model
        self.timeout = timeout
        self.session = session or requests.Session()

    def forward(self, messages: List[Dict[str, Any]]) -> Tuple[Any, int]:
        """
        Send messages upstream.

        Returns:
            (upstream JSON, relay status) where status is 200 when the upstream
            answered 2xx and 500 otherwise.

        Raises:
            requests.exceptions.RequestException: transport failure
            ValueError: upstream body is not JSON
        """
        start_time = time.time()
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        payload = {
            "model": self.model,
            "messages": messages,
        }

        response = self.session.post(
            self.api_url,
            headers=headers,
            json=payload,
            timeout=self.timeout,
        )
        data = response.json()

        status = 200 if response.ok else 500
        usage = (data.get("usage") or {}) if isinstance(data, dict) else {}
        logger.info(
            f"Upstream | model={self.model} | status={response.status_code} | "
            f"messages={len(messages)} | total_tokens={usage.get('total_tokens', 0)} | "
            f"latency_ms={int((time.time() - start_time) * 1000)}"
        )
        return data, status
