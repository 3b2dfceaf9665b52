"""Services package - exports all service modules."""

from .catalog_provider import CatalogProvider
from .views import ProductView, ChatView, escape_html
from .filter_engine import FilterEngine, filter_products
from .selection_store import (
    SelectionStore,
    toggle_selection,
    remove_selection,
    serialize_selection,
    parse_persisted_selection,
)
from .relay_client import RelayClient, RelayError
from .conversation_manager import (
    ConversationManager,
    extract_assistant_text,
    build_chat_messages,
    build_routine_messages,
)
from .completion_forwarder import CompletionForwarder

__all__ = [
    "CatalogProvider",
    "ProductView",
    "ChatView",
    "escape_html",
    "FilterEngine",
    "filter_products",
    "SelectionStore",
    "toggle_selection",
    "remove_selection",
    "serialize_selection",
    "parse_persisted_selection",
    "RelayClient",
    "RelayError",
    "ConversationManager",
    "extract_assistant_text",
    "build_chat_messages",
    "build_routine_messages",
    "CompletionForwarder",
]
