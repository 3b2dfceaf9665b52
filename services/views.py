"""
Render Surfaces

Stand-ins for the page's product grid, selected-products panel and chat
window. Views hold only what is on screen; application state lives in the
selection store and conversation manager, which push updates here.
"""

import html
import itertools
from typing import Iterable, List, Optional, Set

from models import ChatEntry, Product, SelectedProduct

PRODUCTS_PLACEHOLDER = "Select a category to view products"


def escape_html(text) -> str:
    """Escape text so user/assistant content is safe to insert as markup."""
    return html.escape(str(text), quote=True)


class ProductView:
    """Product grid plus the selected-products panel."""

    def __init__(self):
        self.cards: List[Product] = []
        self.highlighted: Set[str] = set()
        self.selected_items: List[SelectedProduct] = []
        self.placeholder: Optional[str] = PRODUCTS_PLACEHOLDER

    def show_products(self, products: Iterable[Product]) -> None:
        """Replace every card. Highlight marks do not survive a redraw."""
        self.cards = list(products)
        self.highlighted = set()
        self.placeholder = None

    def card(self, product_id) -> Optional[Product]:
        wanted = str(product_id)
        for product in self.cards:
            if product.id == wanted:
                return product
        return None

    def set_highlight(self, product_id, selected: bool) -> None:
        """Mark or unmark a card; ids not currently rendered are ignored."""
        product_id = str(product_id)
        if self.card(product_id) is None:
            return
        if selected:
            self.highlighted.add(product_id)
        else:
            self.highlighted.discard(product_id)

    def is_highlighted(self, product_id) -> bool:
        return str(product_id) in self.highlighted

    def render_selected(self, items: Iterable[SelectedProduct]) -> None:
        self.selected_items = list(items)

    def products_html(self) -> str:
        if self.placeholder is not None:
            return f'<div class="placeholder-message">{escape_html(self.placeholder)}</div>'
        cards = []
        for product in self.cards:
            css = "product-card selected" if product.id in self.highlighted else "product-card"
            cards.append(
                f'<div class="{css}" data-id="{escape_html(product.id)}" '
                f'data-name="{escape_html(product.name)}" data-brand="{escape_html(product.brand)}">'
                f'<img src="{escape_html(product.image)}" alt="{escape_html(product.name)}">'
                f'<div class="product-info"><h3>{escape_html(product.name)}</h3>'
                f'<p>{escape_html(product.brand)}</p></div>'
                f'<div class="product-description"><p>{escape_html(product.description)}</p></div>'
                f'</div>'
            )
        return "".join(cards)

    def selected_html(self) -> str:
        return "".join(
            f'<div class="selected-product-item">'
            f'<span>{escape_html(item.brand)} - {escape_html(item.name)}</span>'
            f'<button class="remove-btn" data-id="{escape_html(item.id)}">&times;</button>'
            f'</div>'
            for item in self.selected_items
        )


class ChatView:
    """Chat window: an ordered list of bubbles, including typing indicators."""

    def __init__(self):
        self.entries: List[ChatEntry] = []
        self._ids = itertools.count(1)

    def _append(self, role: str, text: str, kind: str, prefix: str = "msg") -> ChatEntry:
        entry = ChatEntry(entry_id=f"{prefix}-{next(self._ids)}", role=role, text=text, kind=kind)
        self.entries.append(entry)
        return entry

    def add_user_message(self, text: str) -> ChatEntry:
        return self._append("user", text, "message")

    def add_assistant_message(self, text: str) -> ChatEntry:
        return self._append("assistant", text, "message")

    def add_error(self, text: str) -> ChatEntry:
        return self._append("assistant", text, "error")

    def add_notice(self, text: str) -> ChatEntry:
        return self._append("assistant", text, "notice")

    def show_pending(self) -> str:
        """Add a typing indicator and return its id for later removal."""
        return self._append("assistant", "", "typing", prefix="typing").entry_id

    def remove_pending(self, entry_id: str) -> None:
        self.entries = [e for e in self.entries if e.entry_id != entry_id]

    @property
    def pending_ids(self) -> List[str]:
        return [e.entry_id for e in self.entries if e.kind == "typing"]

    def messages(self, kind: Optional[str] = None) -> List[ChatEntry]:
        if kind is None:
            return list(self.entries)
        return [e for e in self.entries if e.kind == kind]

    def render_html(self) -> str:
        parts = []
        for entry in self.entries:
            if entry.kind == "typing":
                parts.append(
                    f'<div class="chat-message assistant typing" id="{entry.entry_id}">'
                    f'<div class="message-bubble"><div class="message-dots">'
                    f'<span></span><span></span><span></span></div></div></div>'
                )
                continue
            parts.append(
                f'<div class="chat-message {entry.role}">'
                f'<div class="message-bubble"><div class="message-text">{escape_html(entry.text)}</div></div>'
                f'</div>'
            )
        return "".join(parts)
