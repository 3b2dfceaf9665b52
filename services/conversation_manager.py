"""
Conversation Manager

Owns the chat transcript and mediates the two request types sent through
the relay:

1. Chat turns: system prompt + full history, result appended to history
2. Routine generation: system prompt + one synthetic user turn built from
   the current selection, result rendered but never recorded

Requests are independent: nothing is coalesced, and each response is
applied when it arrives, so two outstanding sends may complete out of order.
"""

import asyncio
import json
import requests
from typing import Any, Dict, List, Optional

from models import ConversationTurn, Role
from services.relay_client import RelayError
from chat_logger import get_logger, sanitize_log_string

logger = get_logger("routine_advisor")


CHAT_SYSTEM_PROMPT = (
    "You are a helpful assistant that provides advice and answers questions only about "
    "skincare, haircare, makeup, fragrance, and related topics. You can also answer "
    "questions about the generated routine. Do not respond to unrelated topics."
)

ROUTINE_SYSTEM_PROMPT = (
    "You are a helpful assistant that creates personalized skincare and beauty routines "
    "based on the provided products. Keep the routine concise and easy to follow."
)

CHAT_FALLBACK = "Sorry, I couldn't process your request. Please try again."
ROUTINE_FALLBACK = "Sorry, I couldn't generate a routine. Please try again."
EMPTY_SELECTION_NOTICE = "Please select some products to generate a routine."
ERROR_PREFIX = "Request failed: "


# ══════════════════════════════════════════════════════════════
# PURE HELPERS
# ══════════════════════════════════════════════════════════════

def extract_assistant_text(data: Any, fallback: str) -> str:
    """Return choices[0].message.content, or fallback for any other shape."""
    if not isinstance(data, dict):
        return fallback
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return fallback
    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    if isinstance(content, str) and content:
        return content
    return fallback


def append_turn(history: List[ConversationTurn], role: Role, content: str) -> List[ConversationTurn]:
    return list(history) + [ConversationTurn(role=role, content=content)]


def build_chat_messages(history: List[ConversationTurn]) -> List[Dict[str, str]]:
    system = ConversationTurn(role=Role.SYSTEM, content=CHAT_SYSTEM_PROMPT)
    return [system.to_message()] + [turn.to_message() for turn in history]


def build_routine_messages(product_details: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    user_content = (
        f"Here are the selected products: {json.dumps(product_details)}. "
        f"Please create a personalized routine."
    )
    return [
        ConversationTurn(role=Role.SYSTEM, content=ROUTINE_SYSTEM_PROMPT).to_message(),
        ConversationTurn(role=Role.USER, content=user_content).to_message(),
    ]


# ══════════════════════════════════════════════════════════════
# MANAGER
# ══════════════════════════════════════════════════════════════

class ConversationManager:
    def __init__(self, relay, chat_view, selection=None, catalog=None):
        self.relay = relay
        self.chat_view = chat_view
        self.selection = selection
        self.catalog = catalog
        self.history: List[ConversationTurn] = []

    async def _call_relay(self, messages: List[Dict[str, str]]) -> Any:
        """Show a typing indicator for the lifetime of one relay call."""
        pending_id = self.chat_view.show_pending()
        try:
            return await self.relay.send(messages)
        finally:
            self.chat_view.remove_pending(pending_id)

    async def send_chat_turn(self, text: str) -> Optional[str]:
        """
        Send one user message with the full transcript as context.

        Returns the assistant text, or None when the text was blank or the
        relay failed. A failed send keeps the user turn in history so the
        next send carries it as context.
        """
        message = (text or "").strip()
        if not message:
            return None

        self.chat_view.add_user_message(message)
        self.history = append_turn(self.history, Role.USER, message)
        messages = build_chat_messages(self.history)

        logger.info(
            f'Chat | send | history={len(self.history)} | '
            f'message="{sanitize_log_string(message[:100])}"'
        )

        try:
            data = await self._call_relay(messages)
        except RelayError as e:
            self.chat_view.add_error(f"{ERROR_PREFIX}{e}")
            logger.warning(f"Chat | relay failed | error={e}")
            return None

        reply = extract_assistant_text(data, CHAT_FALLBACK)
        if reply == CHAT_FALLBACK:
            logger.warning("Chat | unexpected response shape, using fallback text")
        self.history = append_turn(self.history, Role.ASSISTANT, reply)
        self.chat_view.add_assistant_message(reply)
        logger.info(f"Chat | reply | history={len(self.history)} | chars={len(reply)}")
        return reply

    async def _product_details(self) -> List[Dict[str, Any]]:
        """
        Selected products enriched with category/description from the catalog.

        An unreadable catalog leaves every entry as name and brand only.
        """
        catalog_by_id = {}
        if self.catalog is not None:
            try:
                products = await asyncio.to_thread(self.catalog.load)
                catalog_by_id = {p.id: p for p in products}
            except (OSError, ValueError, requests.exceptions.RequestException) as e:
                logger.warning(f"Routine | catalog unavailable, sending name/brand only | error={e}")

        details = []
        for item in self.selection.items:
            entry: Dict[str, Any] = {"name": item.name, "brand": item.brand}
            product = catalog_by_id.get(item.id)
            if product is not None:
                entry["category"] = product.category
                entry["description"] = product.description
            details.append(entry)
        return details

    async def generate_routine(self) -> Optional[str]:
        """
        Ask for a routine built from the selected products.

        Independent of the chat transcript: history is neither sent nor
        updated. Returns the routine text, or None for an empty selection or
        a relay failure.
        """
        if self.selection is None or len(self.selection) == 0:
            self.chat_view.add_notice(EMPTY_SELECTION_NOTICE)
            logger.info("Routine | no products selected")
            return None

        details = await self._product_details()
        messages = build_routine_messages(details)
        logger.info(f"Routine | generate | products={len(details)}")

        try:
            data = await self._call_relay(messages)
        except RelayError as e:
            self.chat_view.add_error(f"{ERROR_PREFIX}{e}")
            logger.warning(f"Routine | relay failed | error={e}")
            return None

        routine = extract_assistant_text(data, ROUTINE_FALLBACK)
        if routine == ROUTINE_FALLBACK:
            logger.warning("Routine | unexpected response shape, using fallback text")
        self.chat_view.add_assistant_message(routine)
        return routine
